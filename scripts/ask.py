"""Ask a question against a running LitQuery server and wait for the answer.

Usage:
    1. Start the server:   python -m litquery.main
    2. Seed a corpus:      python scripts/seed_corpus.py --corpus pin1-cancer chunks.json
    3. Ask:                python scripts/ask.py --corpus pin1-cancer "How does PIN1 affect cancer?"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from litquery.client.poller import DEFAULT_BASE_URL, JobPoller, PollCallbacks
from litquery.exceptions import LitQueryError


def print_progress(status: dict) -> None:
    print(f"  [{status['status']}] {status.get('progress', '')}", file=sys.stderr)


def print_result(result: dict) -> None:
    print(result["response"])
    print("\nSources:")
    for source in result.get("sources", []):
        meta = source["metadata"]
        print(
            f"  [{source['index']}] {meta.get('title') or 'Unknown Title'} "
            f"(PMID:{meta.get('pmid') or 'N/A'}) {source['similarity'] * 100:.1f}%"
        )
    cited = sum(1 for c in result.get("all_matching_chunks", []) if c["cited_in_response"])
    print(f"\nConfidence: {result.get('confidence')}  verified={result.get('verified')}  cited={cited}")


async def main(args: argparse.Namespace) -> int:
    poller = JobPoller.connect(
        base_url=args.base_url,
        api_key=args.api_key,
        interval_seconds=args.interval,
        max_attempts=args.max_attempts,
    )
    request = {
        "corpus_id": args.corpus,
        "query": args.query,
        "complexity": args.complexity,
        "enable_verification": args.verify,
        "output_style": args.style,
    }
    if args.model:
        request["model"] = args.model
    if args.target_tokens:
        request["target_tokens"] = args.target_tokens

    try:
        result = await poller.submit_and_wait(request, PollCallbacks(on_progress=print_progress))
    except LitQueryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await poller.aclose()

    print_result(result)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ask a question against a corpus")
    parser.add_argument("query", help="Question text")
    parser.add_argument("--corpus", required=True, help="Corpus id, see GET /corpora")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--api-key", default="")
    parser.add_argument("--model", default=None)
    parser.add_argument(
        "--complexity", default="complex", choices=["simple", "complex", "interpretive"]
    )
    parser.add_argument("--style", default="narrative", choices=["narrative", "structured"])
    parser.add_argument("--verify", action="store_true", help="Fact-check the answer")
    parser.add_argument("--target-tokens", type=int, default=None)
    parser.add_argument("--interval", type=float, default=2.0)
    parser.add_argument("--max-attempts", type=int, default=90)
    sys.exit(asyncio.run(main(parser.parse_args())))
