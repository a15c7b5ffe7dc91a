import asyncio
from unittest.mock import AsyncMock, patch

from cli.run import build_channels, build_engine, main
from delivery.discord_delivery import DiscordWebhookDelivery
from delivery.file_delivery import FileDelivery
from services.config import Config, CrawlConfig, NotifyConfig


def test_build_engine_wires_configuration() -> None:
    config = Config(crawl=CrawlConfig(max_links=7), notify=NotifyConfig(max_fields=4))

    engine = build_engine(config)

    assert engine.max_entries == 4
    assert engine.crawler.max_links == 7
    assert engine.crawler.http_options["max_retries"] == 0
    assert engine.extractor.min_length == 5


def test_build_engine_without_crawl() -> None:
    engine = build_engine(Config(crawl=CrawlConfig(enabled=False)))

    assert engine.crawler is None


def test_build_channels_from_secrets(tmp_path) -> None:
    config = Config(
        DISCORD_WEBHOOK_URL="https://discord.example/hook",
        notify=NotifyConfig(file_enabled=True, output_dir=str(tmp_path)),
    )

    channels = build_channels(config)

    assert [type(c) for c in channels] == [DiscordWebhookDelivery, FileDelivery]
    assert build_channels(Config()) == []


def test_main_always_returns_zero() -> None:
    with patch("cli.run.load_config", side_effect=ValueError("broken yaml")):
        assert asyncio.run(main()) == 0

    with patch("cli.run.load_config", return_value=Config(crawl=CrawlConfig(enabled=False))), \
            patch("cli.run.create_adapters_from_config", return_value=[]), \
            patch("cli.run.run_once", new=AsyncMock(side_effect=RuntimeError("boom"))):
        assert asyncio.run(main()) == 0
