"""Run a single expiry sweep, e.g. from cron.

    python sweep_expired.py [--workspace WORKSPACE_ID]
"""

import argparse
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.database import AsyncSessionLocal
from src.core.logging_config import configure_logging
from src.modules.payments.sweeper import ExpirySweeper, SweepResult

logger = logging.getLogger("sweep_expired")


async def sweep(
    workspace_id: str | None = None,
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
) -> SweepResult:
    return await ExpirySweeper(session_factory).run_once(workspace_id=workspace_id)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Cancel pending PIX payments past their deadline.")
    parser.add_argument("--workspace", help="only sweep this workspace id")
    args = parser.parse_args(argv)

    configure_logging()
    result = asyncio.run(sweep(args.workspace))
    logger.info("Cancelled %s payment(s): %s", result.processed, ", ".join(result.payment_ids) or "-")
    return 1 if result.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
