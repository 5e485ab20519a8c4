#!/usr/bin/env python3
"""
Ask Script

Runs a single chat message through the bot pipeline against the live
documentation service and prints the reply that would be posted.
Useful for checking the doc service and reply formatting without Matrix.

Usage:
    python scripts/ask.py "!d CreateUnit"
    python scripts/ask.py "!j CreateUnit" --api-base http://localhost:8000
"""

import sys
import asyncio
import argparse
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def main():
    parser = argparse.ArgumentParser(description="Answer one chat command without Matrix")
    parser.add_argument("message", help='Message body, e.g. "!d CreateUnit"')
    parser.add_argument("--api-base", type=str, default=None, help="Override doc service API base URL")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    from jassbot.common.config import load_config, configure_logging
    from jassbot.common.doc_client import DocServiceClient
    from jassbot.bot.dispatcher import Dispatcher, DispatchStatus
    from jassbot.bot.formatter import ReplyContent

    config = load_config()
    configure_logging("DEBUG" if args.verbose else config.log_level)

    api_base = args.api_base or config.doc_service.api_base
    print(f"[Ask] Doc service: {api_base}")

    dispatcher = Dispatcher(
        DocServiceClient(api_base=api_base, timeout=config.doc_service.timeout),
        doc_base=config.doc_service.doc_base,
    )

    async def send(content: ReplyContent) -> None:
        kind = "markdown" if content.rich else "plain"
        print(f"[Ask] Reply ({kind}):")
        print(content.text)

    status = asyncio.run(dispatcher.handle(args.message, send))
    print(f"[Ask] Status: {status.value}")

    if status == DispatchStatus.FAILED:
        sys.exit(1)


if __name__ == "__main__":
    main()
