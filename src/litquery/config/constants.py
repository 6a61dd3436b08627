"""Fixed vocabularies and tier tables."""

from __future__ import annotations

import re

# Generic English stop-words dropped when tokenizing chunk text for BM25
ENGLISH_STOPWORDS = frozenset(
    {
        "a", "about", "above", "after", "again", "all", "am", "an", "and", "any",
        "are", "as", "at", "be", "because", "been", "before", "being", "below",
        "between", "both", "but", "by", "can", "could", "did", "do", "does",
        "doing", "down", "during", "each", "few", "for", "from", "further",
        "had", "has", "have", "having", "he", "her", "here", "hers", "him",
        "his", "how", "i", "if", "in", "into", "is", "it", "its", "itself",
        "just", "me", "more", "most", "my", "no", "nor", "not", "now", "of",
        "off", "on", "once", "only", "or", "other", "our", "ours", "out",
        "over", "own", "same", "she", "should", "so", "some", "such", "than",
        "that", "the", "their", "theirs", "them", "then", "there", "these",
        "they", "this", "those", "through", "to", "too", "under", "until",
        "up", "very", "was", "we", "were", "what", "when", "where", "which",
        "while", "who", "whom", "why", "will", "with", "would", "you", "your",
    }
)

# Reduction list for the lexical query: English glue plus academic filler
# that rarely matches corpus text
LEXICAL_STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were",
        "explain", "describe", "discuss", "analyze", "examine", "investigate",
        "study", "research", "show", "demonstrate", "known", "unknown",
        "potential", "possible", "likely", "relevant", "important",
        "significant", "role", "roles", "function", "functions", "effect",
        "effects", "impact", "influence", "mechanism", "mechanisms",
        "pathway", "pathways", "process", "processes", "hypothesis",
        "hypothesize", "suggest", "propose", "indicate", "reveal", "lines",
        "line", "approach", "approaches", "method", "methods", "technique",
        "techniques",
    }
)

# Domain terms kept in the lexical query regardless of length or stop-word status
DOMAIN_TERMS = frozenset(
    {
        "pin1", "pin-1", "cancer", "tumor", "protein", "gene", "cell", "dna",
        "rna", "enzyme", "mutation", "expression", "regulation", "signaling",
        "pathway", "inhibitor", "activation", "apoptosis", "proliferation",
        "metastasis", "oncogene", "suppressor", "kinase", "phosphorylation",
    }
)

# First entry is the concept itself; expansion appends the next two
SYNONYMS: dict[str, list[str]] = {
    "gene": ["gene", "genetic", "genomic", "allele", "locus"],
    "protein": ["protein", "polypeptide", "enzyme", "amino acid"],
    "cell": ["cell", "cellular", "cytoplasm", "membrane", "organelle"],
    "dna": ["dna", "deoxyribonucleic acid", "nucleic acid", "genome", "chromosome"],
    "rna": ["rna", "ribonucleic acid", "transcript", "mrna", "transcription"],
    "cancer": ["cancer", "tumor", "neoplasm", "oncology", "carcinoma", "malignant"],
    "calcium": ["calcium", "ca2+", "calcium ion", "calcium binding", "calmodulin"],
    "regulation": ["regulation", "regulatory", "control", "modulation", "expression"],
    "pathway": ["pathway", "signaling", "cascade", "network", "mechanism"],
    "binding": ["binding", "interaction", "affinity", "association", "complex"],
}
SYNONYMS_PER_CONCEPT = 2

SUSPICIOUS_PATTERNS = [
    re.compile(r"select.*from", re.IGNORECASE),
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"eval\(", re.IGNORECASE),
    re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]"),
]

BLOCKED_TERMS = [
    "password", "secret", "token", "key", "admin",
    "drop table", "delete from", "update set", "insert into",
]

COMPLEXITY_TIERS: dict[str, dict] = {
    "simple": {
        "candidates": 5,
        "context_tokens": 3000,
        "max_tokens": 800,
        "instruction": (
            "Provide a clear, concise overview that captures the key points with "
            "thorough referencing. If Narrative format, aim for 1-2 paragraphs."
        ),
    },
    "complex": {
        "candidates": 8,
        "context_tokens": 5000,
        "max_tokens": 1500,
        "instruction": (
            "Explore the topic comprehensively with detailed explanations, context, "
            "and thorough referencing. If Narrative format, aim for 2-5 paragraphs."
        ),
    },
    "interpretive": {
        "candidates": 15,
        "context_tokens": 8000,
        "max_tokens": 2500,
        "instruction": (
            "Provide an in-depth, interpretive analysis with extensive detail, broader "
            "implications, and thorough referencing. If Narrative format, aim for "
            "3-10 paragraphs."
        ),
    },
}

OUTPUT_STYLES = ("narrative", "structured")

CHARS_PER_TOKEN = 4
SUPPORTED_DIMENSIONS = (384, 768)

NO_RESULTS_RESPONSE = (
    "I couldn't find any relevant information in the selected corpus "
    "to answer your question."
)
SUBMIT_ESTIMATED_TIME = "15-60 seconds"
