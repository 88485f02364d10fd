"""Host Settlement Job — invoice every host for the platform debts it still owes.

Invariants:
    - Each host is committed separately: a failure on one host keeps earlier invoices
    - --dry-run reports what would be invoiced and writes nothing

Usage:
    python -m fundhost.cron.host_settlement [--dry-run]
"""

import argparse
import asyncio
import logging

from fundhost.config import get_settings
from fundhost.db.session import create_session_factory
from fundhost.infrastructure.observability import setup_logging
from fundhost.services.host_settlement import run_host_settlement

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Invoice hosts for debts owed to the platform")
    parser.add_argument(
        "--dry-run", action="store_true", help="list owed debts without creating invoices",
    )
    return parser.parse_args(argv)


async def main(dry_run: bool = False) -> list[dict]:
    settings = get_settings()
    session_factory = create_session_factory(settings.database_url)
    async with session_factory() as db:
        try:
            summaries = await run_host_settlement(db, settings.platform_slug, dry_run=dry_run)
        finally:
            await db.bind.dispose()
    for summary in summaries:
        logger.info(
            f"{summary['host']}: {summary['debts']} debts, {summary['amount']} invoiced",
            extra={"expense_id": summary["expense_id"]},
        )
    return summaries


if __name__ == "__main__":
    args = parse_args()
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    asyncio.run(main(dry_run=args.dry_run))
