"""Command line entry point.

Usage:
    python -m vocabkit import words.csv
    python -m vocabkit due
    python -m vocabkit review persistent correct
    python -m vocabkit generate [WORD ...]
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from vocabkit.app import VocabApp
from vocabkit.exceptions import VocabkitError
from vocabkit.logging_config import setup_logging

logger = logging.getLogger("vocabkit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vocabkit", description="Vocabulary import, review and exercises")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import words from a CSV file")
    import_parser.add_argument("path")

    due_parser = subparsers.add_parser("due", help="List words due for review")
    due_parser.add_argument("--limit", type=int, default=None)

    review_parser = subparsers.add_parser("review", help="Record a review outcome")
    review_parser.add_argument("word")
    review_parser.add_argument("outcome", choices=["correct", "incorrect"])

    generate_parser = subparsers.add_parser("generate", help="Generate exercises")
    generate_parser.add_argument("words", nargs="*", help="Words to use (default: words due for review)")
    generate_parser.add_argument("--limit", type=int, default=20)

    return parser


async def run(args: argparse.Namespace) -> int:
    async with VocabApp() as app:
        if args.command == "import":
            count = app.import_csv(args.path)
            print(f"Imported {count} records")
        elif args.command == "due":
            for word in app.due_words(limit=args.limit):
                print(f"{word.text}\t{word.mastery_tier.value}\t{word.next_review_date:%Y-%m-%d}")
        elif args.command == "review":
            word = app.record_review(args.word, args.outcome == "correct")
            print(
                f"{word.text}: {word.mastery_tier.value}, "
                f"next review {word.next_review_date:%Y-%m-%d}"
            )
        elif args.command == "generate":
            groups = await app.generate_exercises(args.words or None, limit=args.limit)
            for group in groups:
                print(f"{group.name}: {len(group.exercises)} exercises ({', '.join(group.word_texts)})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging("Starting vocabkit ...", args.log_level)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(run(args))
    except VocabkitError as e:
        logger.error(e.message)
        return 1
    except ValueError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        return 130
    finally:
        loop.close()


if __name__ == "__main__":
    sys.exit(main())
