"""Email channel registry.

Uses the in-memory fake adapter by default; a real SMTP or provider
adapter can be installed at startup with set_email_channel().
"""

from notifications.channel.email_port import EmailPort

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (singleton)."""
    global _email_channel
    if _email_channel is None:
        from notifications.channel.fake_email import FakeEmailAdapter

        _email_channel = FakeEmailAdapter()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    """Override the active email adapter (useful for tests)."""
    global _email_channel
    _email_channel = channel


def reset_email_channel() -> None:
    """Reset to the default adapter."""
    global _email_channel
    _email_channel = None
