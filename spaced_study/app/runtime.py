"""Bootstrap logic for running the study report."""

from __future__ import annotations

import asyncio
import logging

from spaced_study.app.settings import AppSettings
from spaced_study.db import get_engine, get_session_factory, run_migrations_if_needed
from spaced_study.study.statistics import CollectionStats
from spaced_study.study.workflow import StudyWorkflow


LOGGER = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


def format_stats(stats: CollectionStats) -> str:
    lines = [
        f"Decks: {stats.total_decks}",
        f"Cards: {stats.total} ({stats.studied} studied)",
        f"Due: {stats.due} ({stats.overdue} overdue, {stats.ready} ready)",
        f"New: {stats.new}  Learning: {stats.learning}  Mature: {stats.mature}",
        f"Accuracy: {stats.accuracy}%",
        f"Study days: {stats.study_streak}",
    ]
    return "\n".join(lines)


async def _collect_stats(settings: AppSettings) -> CollectionStats:
    workflow = StudyWorkflow(get_session_factory(), timezone_info=settings.tz)
    try:
        return await workflow.dashboard()
    finally:
        await get_engine().dispose()


def run_report(settings: AppSettings) -> None:
    """Print dashboard statistics for the stored card collection."""
    _configure_logging(settings.log_level)
    print(f"{settings.app_name} is running in {settings.app_env} mode.")

    try:
        run_migrations_if_needed()
    except Exception:
        LOGGER.exception("Database migrations failed. Aborting startup.")
        raise

    stats = asyncio.run(_collect_stats(settings))
    LOGGER.info("Computed statistics for %d cards.", stats.total)
    print(format_stats(stats))
