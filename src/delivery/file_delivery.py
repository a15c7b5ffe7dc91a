"""
File delivery channel
"""
import json
from dataclasses import asdict
from pathlib import Path

from delivery.base import DeliveryChannel, NotificationMessage


class FileDelivery(DeliveryChannel):
    name = "file"

    def __init__(self, output_dir: str = "output"):
        self.output_dir = Path(output_dir)

    async def deliver(self, message: NotificationMessage) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        base = self.output_dir / "last_run"

        base.with_suffix(".json").write_text(
            json.dumps(asdict(message), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

        md_lines = [f"## {message.title}", message.summary, ""]
        for f in message.fields:
            md_lines.append(f"### {f.name}")
            md_lines.append(f.value)
            md_lines.append("")

        base.with_suffix(".md").write_text("\n".join(md_lines), encoding="utf-8")
