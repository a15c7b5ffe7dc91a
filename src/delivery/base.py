"""
Module to contain base class for Delivery channels
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class NotificationField:
    name: str
    value: str


@dataclass(frozen=True)
class NotificationMessage:
    """
    Channel-agnostic notification: a short title, a free-text summary
    and an ordered, already capped list of display fields.
    """
    title: str
    summary: str
    fields: List[NotificationField] = field(default_factory=list)


class DeliveryChannel(ABC):
    """
    Base interface for all delivery channels.
    """

    name: str

    @abstractmethod
    async def deliver(self, message: NotificationMessage) -> None:
        """
        Deliver the notification.
        Must raise exceptions on failure (handled upstream).
        """
        raise NotImplementedError
