"""
AI Insights Bot - collects AI news and posts it to Slack.

This package contains the core modules:
- collectors: X (Twitter), RSS / Atom feeds and GitHub trending repositories
- storage: Post history used to skip already-delivered items
- delivery: Slack message rendering, weekly digest and posting
- services: Collection cycle and weekly digest pipelines
- scheduler: Cron jobs for both pipelines
- api: FastAPI application with health checks and manual triggers
- config: Pydantic settings
- models: Content items, post-history records and run results
"""

__version__ = "0.1.0"
