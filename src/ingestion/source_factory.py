"""
Source Factory - Creates ingestion adapters from configuration.
"""
import logging
from typing import Any, Dict, List, Optional

from ingestion.base import SourceAdapter
from ingestion.bing import BingNewsAdapter
from ingestion.mastodon import MastodonAdapter
from ingestion.reddit import RedditAdapter
from ingestion.rss import RSSAdapter
from ingestion.subreddit import SubRedditOAuthAdapter
from ingestion.twitter import SnscrapeTwitterAdapter
from services.config import Config, SourceConfig, get_enabled_sources

logger = logging.getLogger(__name__)


def http_options(config: Config) -> Dict[str, Any]:
    return {
        "timeout": config.retry.timeout,
        "max_retries": config.retry.max_retries,
        "retry_delay": config.retry.delay,
    }


def _limit(source_config: SourceConfig, default: int) -> int:
    return source_config.limit or default


def create_source_adapter(source_config: SourceConfig, config: Config) -> Optional[SourceAdapter]:
    """
    Create a source adapter from configuration.

    Args:
        source_config: Configuration for the source
        config: Full configuration (credentials, phrases, retry policy)

    Returns:
        Configured SourceAdapter instance, or None when the source's
        prerequisites (API key, toggle, targets) are missing

    Raises:
        ValueError: If source type is unknown
    """
    source_type = source_config.type.lower()
    phrases = config.filter.phrases

    if source_type == "reddit":
        if config.reddit_oauth_enabled:
            return SubRedditOAuthAdapter(
                client_id=config.REDDIT_CLIENT_ID,
                client_secret=config.REDDIT_CLIENT_SECRET,
                username=config.REDDIT_USERNAME,
                password=config.REDDIT_PASSWORD,
                subreddits=source_config.subreddits,
                limit=_limit(source_config, 40),
            )
        return RedditAdapter(
            subreddits=source_config.subreddits,
            limit=_limit(source_config, 40),
            **http_options(config),
        )

    elif source_type == "twitter":
        if not config.USE_SNSCRAPE:
            return None
        return SnscrapeTwitterAdapter(phrases=phrases, limit=_limit(source_config, 40))

    elif source_type == "bing":
        if not config.BING_API_KEY:
            return None
        return BingNewsAdapter(
            api_key=config.BING_API_KEY,
            phrases=phrases,
            limit=_limit(source_config, 25),
            **http_options(config),
        )

    elif source_type == "rss":
        if not source_config.feeds:
            return None
        return RSSAdapter(
            feed_urls=source_config.feeds,
            limit=_limit(source_config, 30),
            **http_options(config),
        )

    elif source_type == "mastodon":
        if not source_config.instances:
            return None
        return MastodonAdapter(
            instances=source_config.instances,
            hashtags=source_config.hashtags,
            limit=_limit(source_config, 40),
            **http_options(config),
        )

    else:
        raise ValueError(f"Unknown source type: {source_type}")


def create_adapters_from_config(config: Config) -> List[SourceAdapter]:
    """
    Create all enabled source adapters, preserving configured order.
    """
    adapters = []

    for source_config in get_enabled_sources(config):
        try:
            adapter = create_source_adapter(source_config, config)
        except Exception as e:
            logger.error(f"Failed to create adapter for {source_config.type}: {e}")
            continue

        if adapter is None:
            logger.info(f"Source {source_config.type} is not configured, skipping")
            continue

        adapters.append(adapter)
        logger.info(f"Created {source_config.type} adapter: {adapter.__class__.__name__}")

    return adapters
