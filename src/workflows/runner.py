"""
A single guarded run: load seen state, aggregate, save, notify.
"""
import logging
from typing import Optional, Sequence

from core.entities import RunResult
from delivery.base import DeliveryChannel, NotificationMessage
from delivery.message import build_error_message, build_status_message
from ingestion.base import SourceAdapter
from services.config import NotifyConfig
from services.seen_store import SeenStore
from workflows.aggregator import AggregationEngine

logger = logging.getLogger(__name__)


async def deliver_all(channels: Sequence[DeliveryChannel], message: NotificationMessage) -> int:
    """
    Send the message to every channel. Returns how many succeeded;
    a failing channel is logged and never stops the others.
    """
    delivered = 0
    for channel in channels:
        try:
            await channel.deliver(message)
            delivered += 1
            logger.info(f"Delivered '{message.title}' via {channel.name}")
        except Exception as e:
            logger.error(f"Delivery failed: channel={channel.name}, error={e}")
    return delivered


async def run_once(
    engine: AggregationEngine,
    adapters: Sequence[SourceAdapter],
    store: SeenStore,
    channels: Sequence[DeliveryChannel],
    notify_config: Optional[NotifyConfig] = None,
) -> Optional[RunResult]:
    """
    Execute one aggregation run. The seen store is saved exactly once,
    also when aggregation raised part way through.
    """
    notify_config = notify_config or NotifyConfig()
    seen = store.load()
    result: Optional[RunResult] = None
    error: Optional[Exception] = None

    try:
        result = await engine.run(adapters, seen)
    except Exception as e:
        error = e
        logger.exception(f"Aggregator fatal error: {e}")

    # Cancellation and interrupts skip this, leaving the previous file untouched
    store.save(seen)

    if result is not None:
        message = build_status_message(result, notify_config.title, notify_config.max_fields)
        logger.info(f"Finished run. New codes: {len(result.new_entries)}")
    else:
        message = build_error_message(error, notify_config.title)

    await deliver_all(channels, message)
    return result
