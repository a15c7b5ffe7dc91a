from typing import List

from core.entities import CodeCandidate, RunResult
from delivery.base import NotificationField, NotificationMessage


def entry_field(entry: CodeCandidate) -> NotificationField:
    lines = [
        f"Title: {entry.title or 'N/A'}",
        f"Code: {entry.code}",
    ]
    if entry.link:
        lines.append(f"[link]({entry.link})")
    return NotificationField(name=entry.source.value, value="\n".join(lines))


def build_status_message(result: RunResult, title: str, max_fields: int) -> NotificationMessage:
    stats = result.stats
    summary: List[str] = [
        f"Scanned {stats.scanned} items across sources.",
        f"New codes found: {len(result.new_entries)}",
    ]
    if len(result.notify_entries) < len(result.new_entries):
        summary.append(f"Showing the first {len(result.notify_entries)}.")
    if stats.failed_sources:
        summary.append(f"Unavailable sources: {', '.join(stats.failed_sources)}")

    fields = [entry_field(e) for e in result.notify_entries[:max_fields]]
    return NotificationMessage(title=title, summary="\n".join(summary), fields=fields)


def build_error_message(error: BaseException, title: str) -> NotificationMessage:
    return NotificationMessage(
        title=f"{title} Error",
        summary=f"Fatal error: {str(error)[:200]}",
    )
