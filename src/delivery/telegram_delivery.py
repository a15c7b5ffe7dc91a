import html

from telegram import Bot
from telegram.constants import ParseMode

from delivery.base import DeliveryChannel, NotificationMessage

MAX_MESSAGE_LENGTH = 4096
MAX_TITLE_LENGTH = 256


def _escape_within(text: str, limit: int) -> str:
    """Escape text, cutting the raw input so the escaped result fits in limit."""
    escaped = html.escape(text)
    if len(escaped) <= limit:
        return escaped

    pieces = []
    size = 0
    for ch in text:
        piece = html.escape(ch)
        if size + len(piece) > limit:
            break
        pieces.append(piece)
        size += len(piece)
    return "".join(pieces)


def render_message(message: NotificationMessage) -> str:
    """
    Render as Telegram HTML. Trailing fields that do not fit are dropped
    whole, so every tag and entity in the result stays complete.
    """
    head = f"<b>{_escape_within(message.title, MAX_TITLE_LENGTH)}</b>"
    summary = _escape_within(message.summary, MAX_MESSAGE_LENGTH - len(head) - 1)
    text = f"{head}\n{summary}".rstrip()

    for f in message.fields:
        block = f"\n\n<b>{html.escape(f.name)}</b>\n{html.escape(f.value).rstrip()}"
        if len(text) + len(block) > MAX_MESSAGE_LENGTH:
            break
        text += block

    return text


class TelegramDelivery(DeliveryChannel):
    name = "telegram"

    def __init__(self, bot_token: str, chat_id: str):
        self.bot = Bot(token=bot_token)
        self.chat_id = chat_id

    async def deliver(self, message: NotificationMessage) -> None:
        await self.bot.send_message(
            chat_id=self.chat_id,
            text=render_message(message),
            parse_mode=ParseMode.HTML,
            disable_web_page_preview=True,
        )
