#!/usr/bin/env python3
"""
Diagnostic script: score one URL and show every signal.
"""
import argparse
import asyncio
import sys

from soteria.errors import InvalidURLError
from soteria.pipeline import trust_pipeline


def print_score(total, details):
    print(f"\n🛡  Trust Score: {total}%")
    print(f"   Reputation: {details['reputation']}%")
    print(f"   SSL:        {details['ssl']}%")
    print(f"   Contact:    {details['contact']}%")


async def diagnose(url: str, has_contact_info: bool) -> int:
    print("=" * 60)
    print("Soteria Diagnostic")
    print("=" * 60)
    print(f"\nURL: {url}")

    try:
        result = await trust_pipeline.analyze(url, has_contact_info, on_score=print_score)
    except InvalidURLError as e:
        print(f"\n❌ {e}")
        return 1

    print(f"\n📅 Registration date: {result.registration.creation_date}")

    print("\n" + "=" * 60)
    print("Diagnostic Complete")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Score a URL with Soteria")
    parser.add_argument("url", help="URL to score")
    parser.add_argument("--contact", action="store_true", help="page exposes contact/about/support/help links")
    args = parser.parse_args()

    sys.exit(asyncio.run(diagnose(args.url, args.contact)))
