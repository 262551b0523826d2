"""
Outbound email notifier.

Registration depends on the notifier: if the verification email cannot be
sent the account is not created.
"""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import Protocol

from food_shared.config.logging import get_logger, mask_email
from food_shared.config.settings import settings
from food_shared.utils.exceptions import UpstreamError

logger = get_logger(__name__)


class Notifier(Protocol):
    """Email delivery contract."""

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        ...


class SmtpNotifier:
    """Sends HTML email through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        username: str = "",
        password: str = "",
        sender: str,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._use_tls = use_tls
        self._timeout = timeout

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to_address
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable client.")
        message.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                if self._use_tls:
                    smtp.starttls()
                if self._username:
                    smtp.login(self._username, self._password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise UpstreamError(
                "notifier",
                step="send email",
                to=mask_email(to_address),
                error=str(exc),
            ) from exc

        logger.info("Email sent", to=mask_email(to_address), subject=subject)


class LogNotifier:
    """Development notifier: logs messages instead of sending them."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        self.sent.append((to_address, subject, html_body))
        logger.info("Email (log backend)", to=mask_email(to_address), subject=subject)


_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """FastAPI dependency returning the configured notifier."""
    global _notifier
    if _notifier is None:
        if settings.notifier_backend == "smtp":
            _notifier = SmtpNotifier(
                settings.smtp_host,
                settings.smtp_port,
                username=settings.smtp_user,
                password=settings.smtp_password,
                sender=settings.smtp_sender,
                use_tls=settings.smtp_use_tls,
                timeout=settings.smtp_timeout,
            )
        else:
            _notifier = LogNotifier()
    return _notifier
