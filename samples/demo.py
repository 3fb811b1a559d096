"""
Demo script for the Invisibrain assistant.

This script feeds a short meeting transcript into the service, asks a
follow-up question and generates notes, all through the rate-limited queue.
Requires GEMINI_API_KEY in the environment or a .env file.
"""

import asyncio
import time

from invisibrain import AssistantService
from invisibrain.speech import TranscriptFeed
from invisibrain.utils import get_api_key, load_config, setup_logging

DEMO_UTTERANCES = [
    "Thanks for joining. Today we need to decide on the caching layer.",
    "I think Redis is the safer choice, we already run it in staging.",
    "Agreed. Priya will write the migration plan by Thursday.",
]


async def main():
    """Run the demo."""
    print("=" * 80)
    print("Invisibrain - Demo")
    print("=" * 80)

    setup_logging(verbose=False)
    api_key = get_api_key()
    if not api_key:
        print("WARNING: No API key found. Set the GEMINI_API_KEY environment variable.")
        print("You can get an API key from: https://makersuite.google.com/app/apikey")
        return

    service = AssistantService.from_config(load_config("config.yaml"), api_key)
    feed = TranscriptFeed(service)

    print("\nFeeding transcript...")
    for utterance in DEMO_UTTERANCES:
        feed.on_final_text(utterance)
    print(f"History holds {len(service.history)} entries")

    print("\nAsking a question...")
    start_time = time.time()
    answer = await service.answer("What was decided about caching?")
    print(f"Answer ({time.time() - start_time:.2f}s):")
    print(answer)

    print("\nGenerating meeting notes (waits for the rate limit)...")
    print(await service.summarize_as_notes())

    print(f"\nQuota: {service.get_quota_status()['day']}")
    service.export_session("demo_session.json")

    print("\nDemo completed!")
    print("\nNext steps:")
    print("1. Try the CLI with: python -m invisibrain --session demo_session.json insights")
    print("2. Start interactive mode: python -m invisibrain interactive")


if __name__ == "__main__":
    asyncio.run(main())
