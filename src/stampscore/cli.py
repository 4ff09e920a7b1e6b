#!/usr/bin/env python3
"""
stampscore CLI — query a passport scorer from the command line.

Commands:
    score    - Refresh the score for a wallet address and show platform totals
    weights  - Show provider weights
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional


def _output(data: dict, args: argparse.Namespace, human_fn=None):
    """Output data as JSON or pretty-printed."""
    if getattr(args, 'json', False):
        print(json.dumps(data, indent=2, default=str))
    elif human_fn:
        human_fn(data)
    else:
        print(json.dumps(data, indent=2, default=str))


def _settings(args: argparse.Namespace):
    from stampscore.config import ScorerSettings
    return ScorerSettings.from_env(api_url=args.api_url, catalog_path=args.catalog)


# ─── Commands ──────────────────────────────────────────────────────

def cmd_score(args):
    """Refresh and display the score for an address."""
    from stampscore.client import ScoreClient
    from stampscore.context import ScoreContext
    from stampscore.models import SubmissionState

    async def run():
        async with ScoreClient(_settings(args)) as client:
            ctx = ScoreContext(client)
            await ctx.fetch_stamp_weights()
            outcome = await ctx.refresh_score(args.address, args.token)
            return ctx.snapshot(), outcome

    snap, outcome = asyncio.run(run())
    result = snap.to_dict()
    result["attempts"] = outcome.attempts if outcome else 0
    result["timed_out"] = outcome.timed_out if outcome else False
    result["error"] = outcome.error if outcome else None

    def human(d):
        state = d['passport_submission_state']
        if state == SubmissionState.ERROR.value:
            print(f"❌ Could not load score for {d['address']}")
            if d['error']:
                print(f"   Reason: {d['error']}")
            return
        if d['timed_out']:
            print(f"⏳ Score for {d['address']} still {d['score_state']} after {d['attempts']} attempts")
            return
        print(f"✅ {d['score_description'] or d['score_state']}: {d['address']}")
        print(f"   Score:     {d['score']:.2f}")
        print(f"   Raw score: {d['raw_score']:.2f}")
        print(f"   Threshold: {d['threshold']:.2f}")
        if d['scored_platforms']:
            print(f"\n   Platforms:")
            for p in d['scored_platforms']:
                print(f"     {p['name']:<20} {p['earned_points']:>6.2f} / {p['possible_points']:.2f}")

    _output(result, args, human)
    if snap.passport_submission_state is SubmissionState.ERROR:
        sys.exit(1)
    return result


def cmd_weights(args):
    """Fetch and display provider weights."""
    from stampscore.client import ScoreClient

    async def run():
        async with ScoreClient(_settings(args)) as client:
            return await client.fetch_weights()

    weights = asyncio.run(run())
    result = {"weights": dict(weights)}

    def human(d):
        print(f"⚖️  {len(d['weights'])} provider weights")
        for provider, weight in sorted(d['weights'].items()):
            print(f"   {provider:<32} {weight:.2f}")

    _output(result, args, human)
    return result


# ─── Parser ────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stampscore",
        description="stampscore — passport scorer CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    parser.add_argument("--api-url", help="Scorer API base URL (default: $SCORER_API_URL)")
    parser.add_argument("--catalog", help="Platform catalog JSON file (default: built-in)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log retries and polling")

    sub = parser.add_subparsers(dest="command", help="Available commands")

    p = sub.add_parser("score", help="Refresh the score for an address")
    p.add_argument("address", help="Wallet address")
    p.add_argument("-t", "--token", required=True, help="Bearer token for the scorer API")

    sub.add_parser("weights", help="Show provider weights")

    return parser


def main(argv: Optional[list[str]] = None) -> Optional[dict]:
    """CLI entry point. Returns result dict for testing."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    commands = {
        "score": cmd_score,
        "weights": cmd_weights,
    }

    from stampscore.client import RequestFailure

    try:
        return commands[args.command](args)
    except FileNotFoundError as e:
        print(f"❌ File not found: {e}", file=sys.stderr)
        sys.exit(1)
    except (RequestFailure, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
