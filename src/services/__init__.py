"""
Pipelines.

- collection_cycle: collect -> dedup -> post -> record
- weekly_digest: summarize the last week of post history
- runner: RunOutcome boundary used by every trigger

The container-backed entry points (run_collection_cycle, run_weekly_digest,
run_job) live in src.services.pipelines.
"""

from src.services.collection_cycle import CollectionCycle
from src.services.runner import execute_run
from src.services.weekly_digest import WeeklyDigestJob

__all__ = ["CollectionCycle", "WeeklyDigestJob", "execute_run"]
