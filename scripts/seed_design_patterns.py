#!/usr/bin/env python3
"""
Seed the design pattern library.

Embeds each pattern's search text and upserts it keyed on source_url,
so re-running the script refreshes existing patterns.

Usage:
    python scripts/seed_design_patterns.py                       # bundled seed set
    python scripts/seed_design_patterns.py --file my_patterns.json
    python scripts/seed_design_patterns.py --db /tmp/dzyne.db
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from dzyne.database import ensure_schema
from dzyne.design.patterns import DesignPatternRepository, build_search_text
from dzyne.utils.openai_embeddings import get_generator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

DEFAULT_SEED_FILE = Path(__file__).resolve().parent / "seed_patterns.json"
DELAY_SECONDS = 0.2


def seed(patterns: list[dict], db_path: Path = None) -> tuple[int, int]:
    """Embed and store patterns. Returns (succeeded, failed)."""
    ensure_schema(db_path)
    repo = DesignPatternRepository(db_path)
    generator = get_generator()

    succeeded = failed = 0
    total = len(patterns)
    for i, pattern in enumerate(patterns, 1):
        logger.info(f"[{i:>3}/{total}] {pattern['name']}")
        try:
            embedding = generator.generate(build_search_text(pattern))
            repo.upsert(pattern, embedding)
            succeeded += 1
        except Exception as e:
            logger.error(f"       Error: {e}")
            failed += 1
        time.sleep(DELAY_SECONDS)

    return succeeded, failed


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--file", type=Path, default=DEFAULT_SEED_FILE, help="JSON list of patterns")
    parser.add_argument("--db", type=Path, default=None, help="Database path (default: DZYNE_DB_PATH)")
    args = parser.parse_args()

    patterns = json.loads(args.file.read_text())
    logger.info(f"Seeding {len(patterns)} design patterns...")

    succeeded, failed = seed(patterns, args.db)
    logger.info(f"Seeding complete: {succeeded} succeeded, {failed} failed out of {len(patterns)} total.")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
