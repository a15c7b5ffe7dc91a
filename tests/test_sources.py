import asyncio
import json
from typing import Dict, List

import httpx
import pytest

from core.entities import SourceKind
from ingestion.bing import BingNewsAdapter
from ingestion.mastodon import MastodonAdapter
from ingestion.reddit import RedditAdapter
from ingestion.rss import RSSAdapter
from ingestion.twitter import SnscrapeTwitterAdapter, build_query

FAST = {"max_retries": 1, "retry_delay": 0}

RSS_BODY = """<?xml version="1.0"?>
<rss version="2.0"><channel><title>Feed</title>
<item><guid>g-1</guid><title>Sora invite code</title><link>https://blog.example/1</link>
<description>&lt;p&gt;Code &lt;b&gt;MN45BV&lt;/b&gt;&lt;/p&gt;</description></item>
<item><title>No guid</title><link>https://blog.example/2</link><description>plain</description></item>
</channel></rss>"""


def _reddit_listing(*posts: Dict) -> Dict:
    return {"data": {"children": [{"kind": "t3", "data": p} for p in posts]}}


def test_reddit_adapter_maps_posts() -> None:
    requested: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        assert request.url.params["raw_json"] == "1"
        assert request.url.params["limit"] == "5"
        return httpx.Response(
            200,
            json=_reddit_listing(
                {"name": "t3_abc", "id": "abc", "title": "sora invite", "selftext": "QW12ER", "permalink": "/r/OpenAI/comments/abc/"}
            ),
        )

    adapter = RedditAdapter(["OpenAI"], limit=5, transport=httpx.MockTransport(handler), **FAST)
    items = asyncio.run(adapter.fetch_items())

    assert requested == ["/r/OpenAI/new/.json"]
    [item] = items
    assert item.source is SourceKind.REDDIT
    assert item.id == "t3_abc"
    assert item.link == "https://reddit.com/r/OpenAI/comments/abc/"
    assert item.text == "QW12ER"


def test_reddit_retries_then_skips_failing_subreddit() -> None:
    calls: Dict[str, int] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        calls[path] = calls.get(path, 0) + 1
        if "Broken" in path:
            return httpx.Response(503)
        return httpx.Response(200, json=_reddit_listing({"id": "ok1", "title": "t"}))

    adapter = RedditAdapter(["Broken", "Fine"], transport=httpx.MockTransport(handler), **FAST)
    result = asyncio.run(adapter.collect())

    assert result.ok
    assert [i.id for i in result.items] == ["ok1"]
    assert calls["/r/Broken/new/.json"] == 2


def test_reddit_unexpected_payload_is_reported() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"error": 429}))
    adapter = RedditAdapter(["OpenAI"], transport=transport, **FAST)

    result = asyncio.run(adapter.collect())

    assert result.items == []
    assert "SourceUnavailableError" in result.error


def test_bing_adapter_sends_key_and_query() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Ocp-Apim-Subscription-Key"] == "secret"
        assert request.url.params["q"] == "sora invite OR sora code"
        assert request.url.params["mkt"] == "en-US"
        return httpx.Response(
            200,
            json={"value": [{"url": "https://news.example/a", "name": "Headline", "description": "desc"}]},
        )

    adapter = BingNewsAdapter("secret", ["sora invite", "sora code"], transport=httpx.MockTransport(handler), **FAST)
    [item] = asyncio.run(adapter.fetch_items())

    assert item.id == "https://news.example/a"
    assert item.title == "Headline"
    assert item.text == "desc"


def test_rss_adapter_parses_feed() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=RSS_BODY))
    adapter = RSSAdapter(["https://blog.example/feed"], transport=transport, **FAST)

    items = asyncio.run(adapter.fetch_items())

    assert [i.id for i in items] == ["g-1", "https://blog.example/2"]
    assert items[0].text == "Code MN45BV"
    assert items[0].source is SourceKind.RSS


def test_rss_all_feeds_down_is_a_failure() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    adapter = RSSAdapter(["https://a.example/feed", "https://b.example/feed"], transport=transport, **FAST)

    result = asyncio.run(adapter.collect())

    assert not result.ok
    assert result.items == []


def test_mastodon_adapter_strips_html() -> None:
    statuses = [
        {
            "id": "1099",
            "url": "https://mastodon.social/@bob/1099",
            "content": "<p>sora invite <span>ER45TY</span></p>",
            "account": {"acct": "bob"},
        }
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "mastodon.social"
        assert request.url.path == "/api/v1/timelines/tag/sora"
        return httpx.Response(200, json=statuses)

    adapter = MastodonAdapter(["mastodon.social"], ["sora"], transport=httpx.MockTransport(handler), **FAST)
    [item] = asyncio.run(adapter.fetch_items())

    assert item.id == "1099"
    assert item.text == "sora invite ER45TY"
    assert item.title == "bob: sora invite ER45TY"


def test_twitter_query_and_output_parsing() -> None:
    assert build_query(["sora invite", "sora code"]) == '"sora invite" OR "sora code" lang:en'

    adapter = SnscrapeTwitterAdapter(["sora invite"], limit=2)
    output = "\n".join(
        [
            json.dumps({"id": 1, "rawContent": "sora invite UI89OP"}),
            "not json",
            json.dumps({"id": 2, "content": "second"}),
            json.dumps({"id": 3, "content": "third"}),
        ]
    )

    items = adapter.parse_output(output)

    assert [i.id for i in items] == ["1", "2"]
    assert items[0].link == "https://twitter.com/i/web/status/1"
    assert items[0].text == "sora invite UI89OP"


def test_twitter_missing_binary_is_a_diagnostic() -> None:
    adapter = SnscrapeTwitterAdapter(["sora invite"], executable="snscrape-does-not-exist")

    result = asyncio.run(adapter.collect())

    assert result.items == []
    assert "FileNotFoundError" in result.error


@pytest.mark.parametrize("status", [403, 429, 500])
def test_collect_never_raises(status: int) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(status))
    adapter = BingNewsAdapter("k", ["sora"], transport=transport, **FAST)

    result = asyncio.run(adapter.collect())

    assert result.items == []
    assert "HTTPStatusError" in result.error


def test_reddit_skips_malformed_listing_entries() -> None:
    payload = {
        "data": {
            "children": [
                "junk",
                {"kind": "t3", "data": None},
                {"kind": "t3", "data": {"name": "t3_ok", "title": "sora invite", "permalink": "/r/OpenAI/comments/ok/"}},
            ]
        }
    }
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    adapter = RedditAdapter(["OpenAI"], transport=transport, **FAST)

    items = asyncio.run(adapter.fetch_items())

    assert [i.id for i in items] == ["t3_ok"]


def test_twitter_skips_non_object_lines() -> None:
    adapter = SnscrapeTwitterAdapter(["sora invite"], limit=5)
    output = "\n".join(["[1, 2]", "42", json.dumps({"id": 7, "rawContent": "sora invite PL09OK"})])

    items = adapter.parse_output(output)

    assert [i.id for i in items] == ["7"]
