"""
Application Settings.

Centralized configuration using Pydantic Settings with environment variable loading.
Secrets are optional at load time so the API and tests can start without them;
`Settings.credentials()` enforces them before any run touches an external service.

Production Mode:
    When app_env="production", additional validations apply:
    - api_key_enabled must be True
    - debug must be False
    - cors_allowed_origins cannot be ["*"]
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.exceptions import ConfigurationError


DEFAULT_PRIORITY_ACCOUNTS = [
    "OpenAI",
    "DeepMind",
    "AnthropicAI",
    "ylecun",
    "karpathy",
    "demishassabis",
    "ID_AA_Carmack",
    "jeremyphoward",
    "goodfellow_ian",
    "fchollet",
    "EmilWallner",
    "hardmaru",
    "jackclarkSF",
    "sama",
]

DEFAULT_SEARCH_KEYWORDS = ["ChatGPT", "GPT-4", "Claude", "Gemini", "LLM", "AGI"]

DEFAULT_RELEVANCE_KEYWORDS = [
    "AI",
    "artificial intelligence",
    "machine learning",
    "deep learning",
    "neural network",
    "GPT",
    "LLM",
    "ChatGPT",
    "Claude",
    "Gemini",
    "transformer",
    "AGI",
    "alignment",
    "safety",
    "reinforcement learning",
]

DEFAULT_FEED_URLS = [
    "https://openai.com/blog/rss.xml",
    "https://deepmind.google/discover/blog/rss.xml",
    "https://www.anthropic.com/news/rss",
]


@dataclass(frozen=True)
class BotCredentials:
    """Secrets and channel needed by a pipeline run."""

    slack_bot_token: str
    twitter_bearer_token: str
    slack_channel: str


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Slack (Delivery)
    # -------------------------------------------------------------------------
    slack_bot_token: SecretStr | None = Field(
        default=None, description="Slack bot token used for chat.postMessage"
    )
    slack_channel: str = Field(
        default="#ai-news", description="Channel that receives collected items"
    )
    slack_api_base: str = Field(
        default="https://slack.com/api", description="Slack Web API base URL"
    )

    # -------------------------------------------------------------------------
    # X / Twitter (Social Collector)
    # -------------------------------------------------------------------------
    twitter_bearer_token: SecretStr | None = Field(
        default=None, description="X API v2 bearer token"
    )
    twitter_api_base: str = Field(
        default="https://api.twitter.com/2", description="X API v2 base URL"
    )
    priority_accounts: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PRIORITY_ACCOUNTS),
        description="Accounts polled for recent posts, in priority order",
    )
    search_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SEARCH_KEYWORDS),
        description="Keywords used for recent-post search, in priority order",
    )
    relevance_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RELEVANCE_KEYWORDS),
        description="Case-insensitive substrings marking a post as AI-related",
    )
    max_accounts: int = Field(default=5, ge=0, description="Accounts polled per run")
    posts_per_account: int = Field(
        default=5, ge=5, le=100, description="Timeline posts fetched per account"
    )
    max_search_keywords: int = Field(default=2, ge=0, description="Keywords searched per run")
    search_results_per_keyword: int = Field(
        default=10, ge=10, le=100, description="Search results fetched per keyword"
    )
    engagement_threshold: int = Field(
        default=20, description="Like count a search result must exceed (unless verified)"
    )
    social_max_items: int = Field(default=5, ge=1, description="Social items kept per run")
    legacy_search_ids: bool = Field(
        default=False,
        description="Key search results as twitter_search_<id>, the format of older post-history records",
    )
    request_delay_ms: int = Field(
        default=1000, ge=0, description="Pause between consecutive social API requests"
    )

    # -------------------------------------------------------------------------
    # RSS / Atom (Feed Collector)
    # -------------------------------------------------------------------------
    feed_urls: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FEED_URLS),
        description="Feeds polled every run",
    )
    entries_per_feed: int = Field(default=3, ge=1, description="Newest entries taken per feed")
    feed_max_items: int = Field(default=3, ge=1, description="Articles kept per run")
    legacy_feed_ids: bool = Field(
        default=False,
        description="Use the short base64 feed id format of older post-history records",
    )

    # -------------------------------------------------------------------------
    # GitHub (Repository-Trend Collector)
    # -------------------------------------------------------------------------
    github_token: SecretStr | None = Field(
        default=None, description="Optional GitHub token for higher search limits"
    )
    github_api_base: str = Field(
        default="https://api.github.com", description="GitHub REST API base URL"
    )
    github_topic: str = Field(
        default="artificial-intelligence", description="Repository topic to search"
    )
    github_max_items: int = Field(default=5, ge=1, le=100, description="Repositories kept per run")

    # -------------------------------------------------------------------------
    # Redis (Deduplication Store)
    # -------------------------------------------------------------------------
    redis_url: str | None = Field(
        default=None, description="Redis connection URL. In-memory store when unset."
    )
    dedup_key_prefix: str = Field(
        default="ai-insights-bot:post-history", description="Prefix for dedup keys"
    )
    dedup_retention_days: int = Field(
        default=30, ge=1, description="Days a delivered item is remembered"
    )
    digest_window_days: int = Field(
        default=7, ge=1, description="Trailing window covered by the weekly digest"
    )

    # -------------------------------------------------------------------------
    # Scheduling (cron expressions, UTC)
    # -------------------------------------------------------------------------
    scheduler_enabled: bool = Field(default=True, description="Start cron jobs with the API")
    collection_schedules: list[str] = Field(
        default_factory=lambda: ["0 0 * * mon-fri", "0 9 * * mon-fri", "0 1 * * sat"],
        description="Crontab expressions for collection runs",
    )
    digest_schedule: str = Field(
        default="0 10 * * sun", description="Crontab expression for the weekly digest"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    display_timezone: str = Field(
        default="Asia/Tokyo", description="Timezone used for dates shown in messages"
    )
    http_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout applied to every outbound HTTP call"
    )
    run_timeout_seconds: float = Field(
        default=300.0, gt=0, description="Upper bound on one scheduled pipeline run"
    )
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    api_port: int = Field(default=8000, description="API bind port")

    # -------------------------------------------------------------------------
    # Security Settings
    # -------------------------------------------------------------------------
    api_key: SecretStr | None = Field(
        default=None,
        description="API key for authentication. If set, all requests require X-API-Key header.",
    )
    api_key_enabled: bool = Field(
        default=False,
        description="Enable API key authentication. Set True for production.",
    )

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins. Use ['*'] for development only.",
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS requests",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def request_delay_seconds(self) -> float:
        return self.request_delay_ms / 1000

    def credentials(self) -> BotCredentials:
        """
        Return the secrets a pipeline run needs.

        Raises:
            ConfigurationError: If the Slack or X token is missing. Raised before
                any external call is made.
        """
        missing = []
        if not self.slack_bot_token or not self.slack_bot_token.get_secret_value():
            missing.append("slack_bot_token")
        if not self.twitter_bearer_token or not self.twitter_bearer_token.get_secret_value():
            missing.append("twitter_bearer_token")

        if missing:
            raise ConfigurationError(
                f"Required configuration missing: {', '.join(missing)}",
                config_key=missing[0],
            )

        return BotCredentials(
            slack_bot_token=self.slack_bot_token.get_secret_value(),
            twitter_bearer_token=self.twitter_bearer_token.get_secret_value(),
            slack_channel=self.slack_channel,
        )

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production settings are secure."""
        if self.app_env == "production":
            errors = []

            # API key must be enabled in production
            if not self.api_key_enabled:
                errors.append("api_key_enabled must be True in production")

            # API key must be set if enabled
            if self.api_key_enabled and not self.api_key:
                errors.append("api_key must be set when api_key_enabled is True")

            # Debug must be disabled in production
            if self.debug:
                errors.append("debug must be False in production")

            # CORS cannot allow all origins in production
            if "*" in self.cors_allowed_origins:
                errors.append("cors_allowed_origins cannot contain '*' in production")

            if errors:
                raise ValueError(
                    f"Production configuration errors: {'; '.join(errors)}"
                )

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings if needed.
    """
    return Settings()
