from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from delivery.base import DeliveryChannel, NotificationMessage

EMBED_COLOR = 0x00FF99

# Discord embed limits
MAX_TITLE = 256
MAX_DESCRIPTION = 4096
MAX_FIELDS = 25
MAX_FIELD_NAME = 256
MAX_FIELD_VALUE = 1024
MAX_EMBED_TOTAL = 6000


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit - 1] + "…"


def build_payload(message: NotificationMessage) -> Dict[str, Any]:
    title = _clip(message.title, MAX_TITLE)
    description = _clip(message.summary, MAX_DESCRIPTION)

    # Discord rejects embeds whose combined text exceeds MAX_EMBED_TOTAL
    total = len(title) + len(description)
    fields: List[Dict[str, str]] = []
    for f in message.fields[:MAX_FIELDS]:
        name = _clip(f.name, MAX_FIELD_NAME)
        value = _clip(f.value, MAX_FIELD_VALUE)
        if total + len(name) + len(value) > MAX_EMBED_TOTAL:
            break
        total += len(name) + len(value)
        fields.append({"name": name, "value": value})

    return {
        "embeds": [
            {
                "title": title,
                "description": description,
                "color": EMBED_COLOR,
                "fields": fields,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ]
    }


class DiscordWebhookDelivery(DeliveryChannel):
    name = "discord"

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.transport = transport

    async def deliver(self, message: NotificationMessage) -> None:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(self.webhook_url, json=build_payload(message))
            resp.raise_for_status()
