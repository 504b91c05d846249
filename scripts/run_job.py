#!/usr/bin/env python3
"""
Run one pipeline and exit.

Useful for cron / container schedulers that trigger each run as a separate
process instead of keeping the API up.

Usage:
    python -m scripts.run_job collect
    python -m scripts.run_job digest --log-level DEBUG

Exit code is 0 when the run succeeded, 1 otherwise. The RunOutcome is
printed to stdout as JSON.
"""

import argparse
import asyncio
import sys

from main import configure_logging
from src.config import get_settings
from src.core.container import DependencyContainer
from src.services.pipelines import JOBS, run_job


async def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run an AI Insights Bot pipeline once")
    parser.add_argument("job", choices=sorted(JOBS), help="Pipeline to run")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    container = DependencyContainer(settings)
    try:
        outcome = await run_job(args.job, container)
    finally:
        await container.shutdown()

    print(outcome.model_dump_json(indent=2))
    return 0 if outcome.success else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
