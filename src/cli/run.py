import argparse
import asyncio
import logging
import time
from typing import List, Optional

from delivery.base import DeliveryChannel
from delivery.discord_delivery import DiscordWebhookDelivery
from delivery.file_delivery import FileDelivery
from delivery.telegram_delivery import TelegramDelivery
from ingestion.source_factory import create_adapters_from_config, http_options
from ingestion.web import LinkCrawler
from processing.extractor import CodeExtractor
from processing.prefilter import RelevanceFilter
from services.config import Config, load_config
from services.logging import setup_logging
from services.seen_store import SeenStore
from workflows.aggregator import AggregationEngine
from workflows.runner import run_once

logger = logging.getLogger(__name__)


def build_engine(config: Config) -> AggregationEngine:
    crawler = None
    if config.crawl.enabled and config.crawl.max_links > 0:
        options = http_options(config)
        # Crawled pages are best effort: one attempt each
        options["max_retries"] = 0
        crawler = LinkCrawler(
            max_links=config.crawl.max_links,
            max_chars=config.crawl.max_chars,
            **options,
        )

    return AggregationEngine(
        relevance=RelevanceFilter(config.filter.phrases),
        extractor=CodeExtractor(
            min_length=config.extractor.min_length,
            max_length=config.extractor.max_length,
            stop_words=config.extractor.stop_words,
        ),
        crawler=crawler,
        max_entries=config.notify.max_fields,
    )


def build_channels(config: Config) -> List[DeliveryChannel]:
    channels: List[DeliveryChannel] = []

    if config.DISCORD_WEBHOOK_URL:
        channels.append(
            DiscordWebhookDelivery(
                webhook_url=config.DISCORD_WEBHOOK_URL,
                timeout=config.notify.timeout,
            )
        )

    if config.TELEGRAM_BOT_TOKEN and config.TELEGRAM_CHAT_ID:
        channels.append(
            TelegramDelivery(
                bot_token=config.TELEGRAM_BOT_TOKEN,
                chat_id=config.TELEGRAM_CHAT_ID,
            )
        )

    if config.notify.file_enabled:
        channels.append(FileDelivery(config.notify.output_dir))

    return channels


async def main(config_path: Optional[str] = None) -> int:
    start_time = time.perf_counter()
    setup_logging()

    try:
        config = load_config(config_path)
    except Exception as e:
        logger.exception(f"Could not load configuration: {e}")
        return 0

    setup_logging(config.LOG_LEVEL)
    logger.info("Starting invite sniper run")

    channels = build_channels(config)
    if not channels:
        logger.warning("No notification channel configured; results will only be logged")

    try:
        await run_once(
            engine=build_engine(config),
            adapters=create_adapters_from_config(config),
            store=SeenStore(config.SEEN_PATH),
            channels=channels,
            notify_config=config.notify,
        )
    except Exception as e:
        logger.exception(f"Run failed: {e}")

    end_time = time.perf_counter()
    logger.info(f"Total time: {end_time - start_time:.2f}s")
    return 0


def cli() -> int:
    parser = argparse.ArgumentParser(description="Single-run invite code aggregator")
    parser.add_argument("--config", help="Path to config.yml (default: resources/config.yml)")
    args = parser.parse_args()
    return asyncio.run(main(args.config))


if __name__ == "__main__":
    raise SystemExit(cli())
