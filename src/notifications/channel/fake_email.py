"""Fake email adapter: records sent emails for testing."""

from uuid import uuid4

from notifications.channel.email_port import DeliveryReceipt, EmailMessage, EmailPort


class FakeEmailAdapter(EmailPort):
    """Email adapter that records messages in memory for test assertions."""

    def __init__(self):
        self.sent_emails: list[EmailMessage] = []
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Email delivery failed"):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, message: EmailMessage) -> DeliveryReceipt:
        if not self.should_succeed:
            return DeliveryReceipt(status="failed", error=self.failure_reason)

        self.sent_emails.append(message)
        return DeliveryReceipt(status="sent", message_id=f"email-{uuid4().hex[:12]}")

    def reset(self):
        """Clear sent emails (useful between tests)."""
        self.sent_emails.clear()
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
