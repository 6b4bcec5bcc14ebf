#!/usr/bin/env python3
"""
Demo Runner Script

Sends one or more prompts through the dispatch coordinator to every
provider that has an API key in the environment (or .env), waits for all
of them to answer, and prints each provider's conversation.

This script:
1. Loads settings and seeds the credential store from the environment
2. Optionally narrows the committed credentials to selected providers
3. Submits each prompt and waits until every provider is idle again
4. Prints each provider's transcript, last error and round latency

Usage:
    python scripts/run_demo.py "What is a monad?"
    python scripts/run_demo.py "ping" "and again" --only claude gemini
    python scripts/run_demo.py "hello" --verbose
    python scripts/run_demo.py --list
"""

import argparse
import asyncio
import sys
import time
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from app.config import configure_logging, get_settings
from app.dispatcher import get_coordinator
from app.registry import ProviderId, get_provider_registry
from app.state import get_conversation_store, get_credential_store


def print_providers() -> None:
    """Print the provider registry and which providers have keys."""
    credentials = get_credential_store()

    print()
    print("Providers")
    print("-" * 60)
    for provider in get_provider_registry().list_providers():
        mark = "x" if credentials.is_configured(provider.provider_id) else " "
        print(
            f"  [{mark}] {provider.provider_id.value:<8} {provider.display_name:<8} "
            f"{provider.api_model_name:<26} key: {provider.credential_help_reference}"
        )
    print()


def restrict_to(provider_ids: list[str]) -> None:
    """Clear the committed keys of every provider not listed."""
    credentials = get_credential_store()
    credentials.open_draft()
    for pid in get_provider_registry().get_provider_ids():
        if pid.value not in provider_ids:
            credentials.edit_draft(pid, "")
    credentials.commit()


def print_conversations(elapsed: dict[int, float]) -> None:
    """Print every provider's transcript and last error."""
    registry = get_provider_registry()
    credentials = get_credential_store()

    for view in get_conversation_store().snapshot():
        provider = registry.get_provider(view.provider_id)
        suffix = "" if credentials.is_configured(view.provider_id) else " (no API key)"

        print("=" * 60)
        print(f"{provider.display_name}{suffix}")
        print("=" * 60)

        if not view.transcript:
            print("  (empty)")
        for turn in view.transcript:
            label = "You" if turn.speaker.value == "user" else provider.display_name
            print(f"{label}> {turn.text}")
            print()

        if view.state.last_error:
            print(f"  ERROR: {view.state.last_error}")
        print()

    if elapsed:
        print("Round latency")
        print("-" * 60)
        for round_number, seconds in elapsed.items():
            print(f"  round {round_number}: {seconds:.2f}s")
        print()


async def run(prompts: list[str]) -> dict[int, float]:
    """
    Submit prompts one round at a time.

    Returns:
        Wall-clock seconds per accepted round, keyed by round number.
    """
    coordinator = get_coordinator()
    elapsed: dict[int, float] = {}

    for round_number, prompt in enumerate(prompts, start=1):
        reason = coordinator.rejection_reason(prompt)
        if reason is not None:
            print(f"Skipping prompt {round_number}: {reason.value}")
            continue

        start = time.perf_counter()
        coordinator.submit(prompt)
        await coordinator.wait_idle()
        elapsed[round_number] = time.perf_counter() - start

    return elapsed


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Send prompts to every configured AI provider and print the answers."
    )
    parser.add_argument(
        "prompts",
        nargs="*",
        help="Prompt(s) to send; each one is a separate round",
    )
    parser.add_argument(
        "--only",
        nargs="+",
        choices=[pid.value for pid in ProviderId],
        help="Only dispatch to these providers (others are treated as unconfigured)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List providers and whether they are configured, then exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show dispatch logging",
    )

    args = parser.parse_args()

    settings = get_settings()
    log_level = "INFO" if args.verbose else "WARNING"
    configure_logging(settings.model_copy(update={"log_level": log_level}))

    if args.only:
        restrict_to(args.only)

    if args.list:
        print_providers()
        return 0

    if not args.prompts:
        parser.error("at least one prompt is required (or use --list)")

    if not get_credential_store().configured_providers():
        print(
            "No API keys configured. Set ANTHROPIC_API_KEY, OPENAI_API_KEY, "
            "GOOGLE_API_KEY or XAI_API_KEY."
        )
        return 1

    elapsed = asyncio.run(run(args.prompts))
    print_conversations(elapsed)

    errors = [v for v in get_conversation_store().snapshot() if v.state.last_error]
    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
