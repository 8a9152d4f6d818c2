"""Initialize the speech-metric result store schema.

Usage:
    python scripts/init_db.py [--db-uri sqlite:///speech_metric.db]
"""

import argparse
import sys

import structlog
from sqlalchemy.exc import SQLAlchemyError

from sm_common.config import get_settings
from sm_common.db import build_engine, check_database_health, create_schema
from sm_common.logging import configure_logging

logger = structlog.get_logger()


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments for schema creation."""
    parser = argparse.ArgumentParser(description="Create the speech-metric database schema")
    parser.add_argument("--db-uri", type=str, default=None, help="SQLAlchemy URL (default: SM_DB_URI)")
    return parser.parse_args()


def main() -> None:
    """Create every table against the configured database."""
    args = parse_args()
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json, service="init-db")

    engine = build_engine(args.db_uri or settings.db_uri)
    try:
        create_schema(engine)
        if not check_database_health(engine):
            logger.error("db_unreachable")
            sys.exit(1)
    except SQLAlchemyError as exc:
        logger.error("db_init_failed", error=str(exc))
        sys.exit(1)
    finally:
        engine.dispose()
    logger.info("db_init_complete")


if __name__ == "__main__":
    main()
