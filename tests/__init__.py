"""
AI Insights Bot Test Suite.

- unit/: Component tests (collectors, dedup store, formatting, settings)
- integration/: Pipelines and API wired together with fake HTTP services
- conftest.py: Shared fixtures and test configuration

Run tests with: pytest
"""
