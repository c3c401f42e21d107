"""
farmwise.setup_db — Entry point for ``python -m farmwise.setup_db``
===================================================================

Wiring:
1. Load .env (secrets).
2. Create the SQLAlchemy engine and ensure tables exist.
3. Seed the demo accounts and challenges (idempotent).

Run with::

    python -m farmwise.setup_db
"""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from farmwise.database.engine import create_db_engine, init_db
from farmwise.database.seed import DEMO_ACCOUNTS, seed_database

logger = logging.getLogger("farmwise")


def main() -> int:
    """Create the schema and seed demo data.  Returns the exit status."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    )
    load_dotenv()

    try:
        engine = create_db_engine()
        init_db(engine)
        seed_database(engine)
    except Exception:
        logger.exception("Database setup failed")
        return 1

    logger.info("Database setup complete.  Demo logins:")
    for demo in DEMO_ACCOUNTS:
        logger.info("  %-7s %s / %s", demo["role"], demo["email"], demo["password"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
