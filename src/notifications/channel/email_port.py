"""Email channel port: abstract interface for email dispatch."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    sender: str
    to: str
    subject: str
    body: str
    html_body: str | None = None


@dataclass(frozen=True)
class DeliveryReceipt:
    """Outcome of a send attempt. ``status`` is "sent" or "failed"."""

    status: str
    message_id: str | None = None
    error: str | None = None

    @property
    def delivered(self) -> bool:
        return self.status == "sent"


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters."""

    @abstractmethod
    def send(self, message: EmailMessage) -> DeliveryReceipt:
        """Send an email message and report whether it was accepted."""
        ...
