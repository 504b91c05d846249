"""
Dependency Injection Container for AI Insights Bot.

Builds every pipeline component from Settings with lazy initialization and
owns the shared resources (HTTP client, dedup backend) so they are closed
once at shutdown.

Usage:
    # At application startup
    container = DependencyContainer()
    await container.initialize()

    result = await container.collection_cycle.run()

    # At shutdown
    await container.shutdown()
"""

from __future__ import annotations

from datetime import timedelta

import httpx
import structlog

from src.collectors.aggregator import Aggregator
from src.collectors.feeds import FeedCollector
from src.collectors.github_trending import GitHubTrendingCollector
from src.collectors.twitter import TwitterClient, TwitterCollector
from src.config.settings import BotCredentials, Settings, get_settings
from src.core.exceptions import ConfigurationError, InitializationError
from src.core.http import build_http_client
from src.delivery.digest import DigestBuilder
from src.delivery.formatter import DeliveryFormatter
from src.delivery.slack import SlackPoster
from src.services.collection_cycle import CollectionCycle
from src.services.weekly_digest import WeeklyDigestJob
from src.storage.backends import DedupBackend, InMemoryDedupBackend, RedisDedupBackend
from src.storage.dedup_store import DedupStore

logger = structlog.get_logger(__name__)


class DependencyContainer:
    """
    Central container for all service dependencies.

    Services are created on first access and cached. Anything that needs
    the Slack or X token goes through ``credentials``, so a missing secret
    raises ConfigurationError before any external call is made.

    Example:
        container = DependencyContainer(settings)
        await container.initialize()

        batch = await container.aggregator.collect_all()

        await container.shutdown()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the container.

        Args:
            settings: Application settings. Defaults to get_settings().
            http_client: Pre-built HTTP client; built from settings when omitted.
        """
        self._settings = settings or get_settings()
        self._credentials: BotCredentials | None = None
        self._http_client: httpx.AsyncClient | None = http_client
        self._store: DedupStore | None = None
        self._aggregator: Aggregator | None = None
        self._poster: SlackPoster | None = None
        self._collection_cycle: CollectionCycle | None = None
        self._weekly_digest: WeeklyDigestJob | None = None
        self._initialized = False

        logger.info("dependency_container_created")

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    @property
    def credentials(self) -> BotCredentials:
        """
        Get run-time secrets.

        Raises:
            ConfigurationError: If a required token is missing.
        """
        if self._credentials is None:
            self._credentials = self._settings.credentials()
        return self._credentials

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Shared HTTP client for collectors and Slack."""
        if self._http_client is None:
            self._http_client = build_http_client(self._settings.http_timeout_seconds)
        return self._http_client

    @property
    def store(self) -> DedupStore:
        """Post-history store, Redis-backed when redis_url is set."""
        if self._store is None:
            backend: DedupBackend
            if self._settings.redis_url:
                backend = RedisDedupBackend(
                    self._settings.redis_url,
                    key_prefix=self._settings.dedup_key_prefix,
                )
            else:
                logger.warning("dedup_store_in_memory", reason="redis_url not configured")
                backend = InMemoryDedupBackend()
            self._store = DedupStore(
                backend,
                retention=timedelta(days=self._settings.dedup_retention_days),
            )
        return self._store

    @property
    def aggregator(self) -> Aggregator:
        """Aggregator over the social, feed and repository collectors."""
        if self._aggregator is None:
            s = self._settings
            twitter = TwitterCollector(
                TwitterClient(
                    self.http_client,
                    self.credentials.twitter_bearer_token,
                    base_url=s.twitter_api_base,
                ),
                s.priority_accounts,
                s.search_keywords,
                s.relevance_keywords,
                max_accounts=s.max_accounts,
                posts_per_account=s.posts_per_account,
                max_search_keywords=s.max_search_keywords,
                results_per_keyword=s.search_results_per_keyword,
                engagement_threshold=s.engagement_threshold,
                max_items=s.social_max_items,
                legacy_search_ids=s.legacy_search_ids,
                request_delay=s.request_delay_seconds,
            )
            feeds = FeedCollector(
                self.http_client,
                s.feed_urls,
                entries_per_feed=s.entries_per_feed,
                max_items=s.feed_max_items,
                legacy_ids=s.legacy_feed_ids,
            )
            github = GitHubTrendingCollector(
                self.http_client,
                topic=s.github_topic,
                max_items=s.github_max_items,
                token=s.github_token.get_secret_value() if s.github_token else None,
                base_url=s.github_api_base,
            )
            self._aggregator = Aggregator([twitter, feeds, github])
        return self._aggregator

    @property
    def poster(self) -> SlackPoster:
        if self._poster is None:
            self._poster = SlackPoster(
                self.http_client,
                self.credentials.slack_bot_token,
                api_base=self._settings.slack_api_base,
            )
        return self._poster

    @property
    def collection_cycle(self) -> CollectionCycle:
        if self._collection_cycle is None:
            self._collection_cycle = CollectionCycle(
                self.aggregator,
                self.store,
                DeliveryFormatter(timezone=self._settings.display_timezone),
                self.poster,
                self.credentials.slack_channel,
            )
        return self._collection_cycle

    @property
    def weekly_digest(self) -> WeeklyDigestJob:
        if self._weekly_digest is None:
            self._weekly_digest = WeeklyDigestJob(
                self.store,
                DigestBuilder(timezone=self._settings.display_timezone),
                self.poster,
                self.credentials.slack_channel,
                window=timedelta(days=self._settings.digest_window_days),
            )
        return self._weekly_digest

    async def initialize(self) -> None:
        """
        Validate configuration and build the pipelines.

        Call this at application startup.

        Raises:
            ConfigurationError: If required secrets are missing.
            InitializationError: If a component cannot be created.
        """
        if self._initialized:
            logger.warning("container_already_initialized")
            return

        logger.info("container_initializing")

        try:
            logger.info(
                "pipelines_ready",
                channel=self.collection_cycle.channel,
                digest_window_days=self.weekly_digest.window.days,
            )
        except (ConfigurationError, InitializationError):
            raise
        except Exception as e:
            logger.error(
                "container_initialization_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise InitializationError(
                "DependencyContainer",
                f"Failed to initialize dependencies: {e}",
            )

        self._initialized = True
        logger.info("container_initialized")

    async def shutdown(self) -> None:
        """
        Close shared resources.

        Call this at application shutdown.
        """
        logger.info("container_shutting_down")

        if self._store is not None:
            try:
                await self._store.close()
            except Exception as e:
                logger.error("dedup_store_close_error", error=str(e))

        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

        self._initialized = False
        logger.info("container_shutdown_complete")

    @property
    def is_initialized(self) -> bool:
        """Check if container has been initialized."""
        return self._initialized


# Global container instance for convenience
# Prefer passing container explicitly via dependency injection
_container: DependencyContainer | None = None


def get_container() -> DependencyContainer:
    """
    Get the global container instance.

    Creates one if it doesn't exist. Prefer passing container
    explicitly for better testability.
    """
    global _container
    if _container is None:
        _container = DependencyContainer()
    return _container


def set_container(container: DependencyContainer | None) -> None:
    """Replace the global container (tests and app startup)."""
    global _container
    _container = container


async def initialize_container() -> DependencyContainer:
    """
    Initialize and return the global container.

    Convenience function for application startup.
    """
    container = get_container()
    await container.initialize()
    return container


async def shutdown_container() -> None:
    """
    Shutdown the global container.

    Convenience function for application shutdown.
    """
    global _container
    if _container is not None:
        await _container.shutdown()
        _container = None
