# academy_loader/main.py

"""
Command line entry point: generate a fresh academy dataset and load it.

Exit status is 0 when the load was committed and 1 otherwise.
"""

import argparse
import asyncio
import logging
import random
import sys
from typing import List, Optional

from .config import Settings, get_settings, setup_logging, validate_settings
from .database import DatabaseManager
from .exceptions import ConfigurationError, DatabaseError
from .generator import DEFAULT_COURSE_COUNT, DEFAULT_STUDENT_COUNT, generate_dataset
from .loader import AcademyLoader, LoadPhase, LoadResult

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Data loaded into the database successfully"


async def run(
    settings: Settings,
    seed: Optional[int] = None,
    create_schema: bool = False,
) -> LoadResult:
    """Generate the dataset, then connect, load and release the engine."""
    rng = random.Random(seed)
    if seed is not None:
        logger.info(f"Initializing RNG with seed: {seed}")

    dataset = generate_dataset(DEFAULT_STUDENT_COUNT, DEFAULT_COURSE_COUNT, rng)

    db = DatabaseManager()
    try:
        logger.info(f"Connecting to {settings.safe_database_url}")
        try:
            await db.initialize(settings.database_url, echo=settings.DATABASE_ECHO)
            if create_schema:
                await db.create_all_tables()
        except DatabaseError as e:
            logger.error(f"Database setup failed: {e.message}", exc_info=True)
            return LoadResult(success=False, phase=LoadPhase.CONNECT, error=e)

        return await AcademyLoader(db).load(dataset)
    finally:
        await db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="academy-loader",
        description="Replace the academy tables with freshly generated fake data.",
    )
    parser.add_argument(
        "--database-url", help="Database connection URL (overrides DATABASE_URL)."
    )
    parser.add_argument(
        "--seed", type=int, help="A seed for the random number generator."
    )
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create the courses, students and exams tables if missing.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (overrides LOG_LEVEL).",
    )
    return parser


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Apply CLI overrides on top of the environment settings."""
    settings = get_settings()
    overrides = {}
    if args.database_url:
        overrides["DATABASE_URL"] = args.database_url
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    if overrides:
        # Re-validate so the URL normalization applies to CLI input too
        settings = settings.model_validate({**settings.model_dump(), **overrides})

    issues = validate_settings(settings)
    if issues:
        raise ConfigurationError(
            "Invalid configuration: " + "; ".join(issues), issues=issues
        )
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = resolve_settings(args)
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(e.message)
        return 1

    setup_logging(settings)
    seed = args.seed if args.seed is not None else settings.RANDOM_SEED

    result = asyncio.run(
        run(settings, seed=seed, create_schema=args.create_schema)
    )

    if result.success:
        print(SUCCESS_MESSAGE)
        logger.info(f"Row counts: {result.row_counts}")
    else:
        logger.critical(
            f"Loading failed during {result.phase.value}. See error details above."
        )
        logger.error(f"Load report: {result.to_dict()}")
    return result.exit_code


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
