"""
Loads and handles config from config.yml
Secrets (webhook URL, bot token, API keys, Reddit credentials) are loaded from .env
"""
import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator

from processing.extractor import DEFAULT_STOP_WORDS
from processing.prefilter import DEFAULT_PHRASES

logger = logging.getLogger(__name__)


class SourceConfig(BaseModel):
    """Configuration for a single ingestion source."""
    type: str  # reddit, twitter, bing, rss, mastodon
    enabled: bool = True
    limit: Optional[int] = None
    subreddits: Optional[List[str]] = None  # For reddit
    feeds: Optional[List[str]] = None  # For rss
    instances: Optional[List[str]] = None  # For mastodon
    hashtags: Optional[List[str]] = None  # For mastodon


class FilterConfig(BaseModel):
    phrases: List[str] = Field(default_factory=lambda: list(DEFAULT_PHRASES))


class ExtractorConfig(BaseModel):
    min_length: int = Field(5, ge=1)
    max_length: int = Field(8, ge=1)
    stop_words: List[str] = Field(default_factory=lambda: list(DEFAULT_STOP_WORDS))

    @model_validator(mode="after")
    def check_bounds(self) -> "ExtractorConfig":
        if self.max_length < self.min_length:
            raise ValueError(
                f"extractor.max_length ({self.max_length}) must be >= extractor.min_length ({self.min_length})"
            )
        return self


class RetryConfig(BaseModel):
    max_retries: int = Field(2, ge=0)
    delay: float = Field(2.0, ge=0.0)
    timeout: float = Field(10.0, gt=0.0)


class CrawlConfig(BaseModel):
    enabled: bool = True
    max_links: int = Field(20, ge=0)
    max_chars: int = Field(20000, gt=0)


class NotifyConfig(BaseModel):
    title: str = "Sora Sniper Status"
    max_fields: int = Field(12, ge=0)
    timeout: float = Field(15.0, gt=0.0)
    file_enabled: bool = False
    output_dir: str = "output"


def _default_sources() -> List[SourceConfig]:
    return [
        SourceConfig(type="reddit"),
        SourceConfig(type="twitter"),
        SourceConfig(type="bing"),
        SourceConfig(type="rss"),
        SourceConfig(type="mastodon"),
    ]


class Config(BaseModel):
    # Core
    SEEN_PATH: str = "seen.json"
    LOG_LEVEL: str = "INFO"

    filter: FilterConfig = Field(default_factory=FilterConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)

    # Ordered: earlier sources win ties when two posts carry the same code
    sources: List[SourceConfig] = Field(default_factory=_default_sources)

    # Discord
    DISCORD_WEBHOOK_URL: Optional[str] = None

    # Telegram
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_CHAT_ID: Optional[str] = None

    # Source credentials / toggles
    BING_API_KEY: Optional[str] = None
    USE_SNSCRAPE: bool = False
    REDDIT_CLIENT_ID: Optional[str] = None
    REDDIT_CLIENT_SECRET: Optional[str] = None
    REDDIT_USERNAME: Optional[str] = None
    REDDIT_PASSWORD: Optional[str] = None

    @property
    def reddit_oauth_enabled(self) -> bool:
        return all([
            self.REDDIT_CLIENT_ID,
            self.REDDIT_CLIENT_SECRET,
            self.REDDIT_USERNAME,
            self.REDDIT_PASSWORD,
        ])


def _bool(value: str | bool | None) -> bool:
    """Convert string or bool to boolean."""
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("1", "true", "yes", "on")


def _csv(value: Optional[str]) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def _get_config_path(path: Optional[str] = None) -> Optional[str]:
    """Find config.yml, handling different working directories."""
    if path:
        return path

    env_path = os.getenv("CONFIG_PATH")
    if env_path:
        return env_path

    if os.path.exists("resources/config.yml"):
        return "resources/config.yml"

    project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    config_path = os.path.join(project_root, "resources", "config.yml")
    if os.path.exists(config_path):
        return config_path

    return None


def _parse_sources(data: List[Dict[str, Any]]) -> List[SourceConfig]:
    """Parse source entries, skipping the ones that do not validate."""
    sources = []
    for src in data:
        try:
            sources.append(SourceConfig(**src))
        except (TypeError, ValidationError) as e:
            logger.error(f"Ignoring invalid source entry {src!r}: {e}")
    return sources


def _apply_target_overrides(sources: List[SourceConfig]) -> None:
    """Comma-separated env vars replace the targets of the matching source."""
    overrides = {
        "reddit": ("subreddits", _csv(os.getenv("SUBREDDITS"))),
        "rss": ("feeds", _csv(os.getenv("RSS_FEEDS"))),
        "mastodon": ("instances", _csv(os.getenv("MASTODON_INSTANCES"))),
    }

    for source_type, (field_name, values) in overrides.items():
        if not values:
            continue
        matching = [s for s in sources if s.type.lower() == source_type]
        if not matching:
            sources.append(SourceConfig(type=source_type, **{field_name: values}))
            continue
        for source in matching:
            setattr(source, field_name, values)


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from config.yml and secrets from .env."""
    # Load .env for sensitive credentials
    load_dotenv()

    config: Dict[str, Any] = {}
    config_path = _get_config_path(path)
    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}
    else:
        logger.warning(f"Config file not found ({config_path or 'resources/config.yml'}), using defaults")

    sources = _parse_sources(config["sources"]) if "sources" in config else _default_sources()
    _apply_target_overrides(sources)

    return Config(
        SEEN_PATH=os.getenv("SEEN_PATH") or config.get("SEEN_PATH", "seen.json"),
        LOG_LEVEL=os.getenv("LOG_LEVEL") or config.get("LOG_LEVEL", "INFO"),

        filter=FilterConfig(**config.get("filter", {})),
        extractor=ExtractorConfig(**config.get("extractor", {})),
        retry=RetryConfig(**config.get("retry", {})),
        crawl=CrawlConfig(**config.get("crawl", {})),
        notify=NotifyConfig(**config.get("notify", {})),
        sources=sources,

        DISCORD_WEBHOOK_URL=os.getenv("DISCORD_WEBHOOK_URL"),
        TELEGRAM_BOT_TOKEN=os.getenv("TELEGRAM_BOT_TOKEN"),
        TELEGRAM_CHAT_ID=os.getenv("TELEGRAM_CHAT_ID"),

        BING_API_KEY=os.getenv("BING_API_KEY"),
        USE_SNSCRAPE=_bool(os.getenv("USE_SNSCRAPE", config.get("USE_SNSCRAPE", False))),
        REDDIT_CLIENT_ID=os.getenv("REDDIT_CLIENT_ID"),
        REDDIT_CLIENT_SECRET=os.getenv("REDDIT_CLIENT_SECRET"),
        REDDIT_USERNAME=os.getenv("REDDIT_USERNAME"),
        REDDIT_PASSWORD=os.getenv("REDDIT_PASSWORD"),
    )


def get_enabled_sources(config: Config) -> List[SourceConfig]:
    """Get only enabled sources, in configured order."""
    return [src for src in config.sources if src.enabled]
