"""All prompt templates for answer generation and verification."""

from __future__ import annotations

from litquery.models.domain import ContextEntry

STRUCTURED_PROMPT = """You are a specialized AI assistant in biological research, operating at Professor level.

QUERY: {query}

CONTEXT from {corpus_name} research papers:
{context}

PROVIDE A STRUCTURED RESPONSE:

1. EXECUTIVE SUMMARY (2-3 sentences)
2. SCIENTIFIC ANALYSIS (mechanisms, pathways, experimental details)
3. EVIDENCE EVALUATION (cite as "Finding (2024, PMID:12345678)")
4. LIMITATIONS & GAPS
5. BIOLOGICAL CONTEXT

{instruction}"""

NARRATIVE_PROMPT = """You are an expert scientific writer, operating at Professor level. Write a manuscript-style narrative response.

QUERY: {query}

CONTEXT from {corpus_name} research papers:
{context}

Write a flowing narrative that:
- Establishes biological significance
- Synthesizes current understanding from literature
- Integrates citations naturally: "Studies show X (2024, PMID:12345678)"
- Discusses mechanisms and implications
- Uses scholarly tone with smooth transitions
- Avoids bullet points - write in paragraph form

{instruction}"""

VERIFICATION_PROMPT = """You are a scientific fact-checker. Analyze the following response and verify if each claim is supported by the provided sources.

RESPONSE TO VERIFY:
{response}

SOURCES:
{sources_block}

INSTRUCTIONS:
1. Identify each factual claim in the response
2. Check if each claim is supported by the sources
3. Mark unsupported claims with [UNVERIFIED]
4. Provide an overall confidence score (0-100%)
5. Return the response with verification markers and confidence score

FORMAT:
VERIFIED_RESPONSE: [Response with [UNVERIFIED] markers for unsupported claims]
CONFIDENCE: [0-100 percentage]"""


def build_answer_prompt(
    query: str,
    context: str,
    corpus_name: str,
    instruction: str,
    output_style: str,
) -> str:
    template = NARRATIVE_PROMPT if output_style == "narrative" else STRUCTURED_PROMPT
    return template.format(
        query=query,
        context=context,
        corpus_name=corpus_name,
        instruction=instruction,
    )


def format_sources_block(entries: list[ContextEntry]) -> str:
    """Number sources with the same labels the model saw in its context."""
    return "\n\n".join(
        f"Source {e.citation_index} (PMID: {e.chunk.metadata.pmid or 'N/A'}): {e.chunk.content}"
        for e in entries
    )
