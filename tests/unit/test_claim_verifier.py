"""Tests for the claim verification pass."""

import pytest
from conftest import FakeLLM, make_scored

from litquery.exceptions import GenerationError
from litquery.models.domain import ContextEntry
from litquery.verification.claim_verifier import ClaimVerifier

DRAFT = "PIN1 drives proliferation [1]."


@pytest.fixture
def entries():
    return [ContextEntry(1, make_scored("a", 0.9, pmid="1001", content="PIN1 drives growth."))]


@pytest.mark.asyncio
async def test_verify_parses_response_and_confidence(entries):
    llm = FakeLLM(["VERIFIED_RESPONSE:\nPIN1 promotes growth [1].\nCONFIDENCE: 72"])
    result = await ClaimVerifier(llm).verify(DRAFT, entries, model="m")

    assert result.response == "PIN1 promotes growth [1]."
    assert result.confidence == 72
    assert not result.degraded
    call = llm.calls[0]
    assert call["max_tokens"] == 800
    assert call["temperature"] == 0.1
    assert "Source 1 (PMID: 1001): PIN1 drives growth." in call["prompt"]
    assert DRAFT in call["prompt"]


@pytest.mark.asyncio
async def test_verify_degrades_on_upstream_failure(entries):
    llm = FakeLLM([GenerationError("timed out")])
    result = await ClaimVerifier(llm).verify(DRAFT, entries, model="m")

    assert result.response == DRAFT
    assert result.confidence == 50
    assert result.degraded


def test_parse_clamps_confidence():
    verifier = ClaimVerifier(FakeLLM())
    assert verifier.parse("VERIFIED_RESPONSE: ok CONFIDENCE: 150", DRAFT).confidence == 100


def test_parse_without_confidence_is_neutral():
    result = ClaimVerifier(FakeLLM(), neutral_confidence=40).parse("Looks fine to me.", DRAFT)
    assert result.response == DRAFT
    assert result.confidence == 40
    assert result.degraded


def test_parse_empty_verified_text_keeps_draft():
    result = ClaimVerifier(FakeLLM()).parse("VERIFIED_RESPONSE:   CONFIDENCE: 90", DRAFT)
    assert result.response == DRAFT
    assert result.confidence == 90
