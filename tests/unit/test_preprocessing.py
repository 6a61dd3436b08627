"""Tests for query expansion and lexical query reduction."""

from litquery.query.preprocessing import build_lexical_query, expand_query, normalize


def test_expand_adds_two_synonyms_per_concept():
    assert expand_query("What regulates gene X?") == "what regulates gene x? genetic genomic"


def test_expand_deduplicates_words():
    expanded = expand_query("DNA and cancer")
    assert expanded == "dna and cancer deoxyribonucleic acid nucleic tumor neoplasm"


def test_expand_without_domain_terms_only_lowercases():
    assert expand_query("  Why   do Birds sing ") == "why do birds sing"


def test_expand_caps_length():
    assert len(expand_query("word " * 200)) <= 500
    assert len(expand_query("x" * 600)) == 500


def test_lexical_query_drops_filler_and_short_words():
    query = "Explain the role of PIN1 in cancer's metastasis"
    assert build_lexical_query(query) == "pin1 cancers metastasis"


def test_lexical_query_keeps_short_domain_terms():
    assert build_lexical_query("DNA or RNA of it") == "dna rna"


def test_lexical_query_strips_punctuation():
    assert build_lexical_query("PIN-1: kinase (binding)?") == "pin-1 kinase binding"


def test_lexical_query_caps_terms():
    query = "alpha beta gamma delta epsilon zeta theta iota kappa lambda"
    assert build_lexical_query(query).split() == [
        "alpha", "beta", "gamma", "delta", "epsilon", "zeta", "theta", "iota",
    ]


def test_normalize_collapses_whitespace():
    assert normalize("a\t b\n\nc ") == "a b c"
