"""Integration test configuration.

FakeServices stands in for every external HTTP API the bot talks to (X,
the feeds, GitHub and Slack) behind one httpx.MockTransport, so pipelines
run end to end through the real container, collectors and store.
"""

import json
from email.utils import format_datetime
from datetime import datetime, timezone

import httpx
import pytest

from src.config.settings import Settings
from src.core.container import DependencyContainer

FEED_URL = "https://blog.example.com/rss"


def _rss() -> bytes:
    published = format_datetime(datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc), usegmt=True)
    return (
        '<?xml version="1.0" encoding="UTF-8"?><rss version="2.0"><channel>'
        "<title>Example Lab</title><link>https://blog.example.com</link><description>d</description>"
        "<item><title>Scaling laws revisited</title>"
        "<link>https://blog.example.com/scaling</link>"
        "<description>A look at compute-optimal training.</description>"
        f"<pubDate>{published}</pubDate></item>"
        "</channel></rss>"
    ).encode("utf-8")


class FakeServices:
    """Routes requests by host and path; records Slack posts."""

    def __init__(self):
        self.slack_posts: list[dict] = []
        self.slack_error: str | None = None
        self.twitter_status = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host, path = request.url.host, request.url.path

        if host == "api.twitter.com":
            return self._twitter(path)
        if host == "blog.example.com":
            return httpx.Response(200, content=_rss())
        if host == "api.github.com":
            return httpx.Response(200, json={"items": [self._repo()]})
        if host == "slack.com":
            return self._slack(request)
        return httpx.Response(404)

    def _twitter(self, path: str) -> httpx.Response:
        if self.twitter_status != 200:
            return httpx.Response(self.twitter_status, json={"title": "Unauthorized"})
        if path == "/2/users/by/username/OpenAI":
            return httpx.Response(200, json={"data": {"id": "100", "username": "OpenAI"}})
        if path == "/2/users/100/tweets":
            return httpx.Response(200, json={"data": [{
                "id": "1",
                "text": "Introducing a new AI model for reasoning",
                "created_at": "2024-05-01T10:00:00.000Z",
                "public_metrics": {"like_count": 900, "retweet_count": 120},
            }]})
        if path == "/2/tweets/search/recent":
            return httpx.Response(200, json={
                "data": [{
                    "id": "2",
                    "text": "Benchmarks for every open LLM in one table",
                    "created_at": "2024-05-01T08:00:00.000Z",
                    "author_id": "200",
                    "public_metrics": {"like_count": 5, "retweet_count": 1},
                }],
                "includes": {"users": [{"id": "200", "username": "researcher", "verified": True}]},
            })
        return httpx.Response(404)

    @staticmethod
    def _repo() -> dict:
        return {
            "id": 300,
            "name": "awesome-llm",
            "description": "Curated LLM resources",
            "html_url": "https://github.com/org/awesome-llm",
            "stargazers_count": 25000,
            "language": "Python",
            "forks_count": 2000,
            "owner": {"login": "org"},
            "updated_at": "2024-04-30T08:00:00Z",
        }

    def _slack(self, request: httpx.Request) -> httpx.Response:
        if self.slack_error:
            return httpx.Response(200, json={"ok": False, "error": self.slack_error})
        self.slack_posts.append(json.loads(request.content))
        return httpx.Response(200, json={"ok": True, "ts": str(len(self.slack_posts))})


def _settings(**overrides) -> Settings:
    values = dict(
        slack_bot_token="xoxb-test",
        twitter_bearer_token="bearer-test",
        slack_channel="#ai-news",
        priority_accounts=["OpenAI"],
        search_keywords=["LLM"],
        relevance_keywords=["AI", "LLM"],
        max_search_keywords=1,
        feed_urls=[FEED_URL],
        request_delay_ms=0,
        redis_url=None,
        scheduler_enabled=False,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def make_settings():
    """Factory for Settings pointing every collector at FakeServices."""
    return _settings


@pytest.fixture
def services() -> FakeServices:
    return FakeServices()


@pytest.fixture
async def container(services):
    http = httpx.AsyncClient(transport=httpx.MockTransport(services.handler))
    container = DependencyContainer(_settings(), http_client=http)
    yield container
    await container.shutdown()
