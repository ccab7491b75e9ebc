"""Outgoing mail: HTML wrapper and an SMTP/console transport."""

from __future__ import annotations

import asyncio
import smtplib
from email.message import EmailMessage
from functools import partial

from .config import settings
from .logging import get_logger

logger = get_logger(__name__)


class MailError(Exception):
    """Raised when an email cannot be delivered."""

    pass


def make_a_nice_email(text: str) -> str:
    """Wrap a message body in the shop's plain HTML email layout."""
    return f"""
  <div class="email" style="
    border: 1px solid black;
    padding: 20px;
    font-family: sans-serif;
    line-height: 2;
    font-size: 20px;
  ">
    <h2>Hello There!</h2>
    <p>{text}</p>

    <p>Cheers, Brytashop</p>
  </div>
"""


class MailTransport:
    """Send HTML mail over SMTP, or log it when the console backend is selected."""

    def __init__(
        self,
        backend: str = "console",
        host: str = "localhost",
        port: int = 25,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = False,
    ):
        if backend not in ("console", "smtp"):
            raise ValueError(f"Unsupported mail backend: {backend}")

        self.backend = backend
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls

    async def send_mail(self, *, from_addr: str, to: str, subject: str, html: str) -> None:
        message = EmailMessage()
        message["From"] = from_addr
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        if self.backend == "console":
            logger.info("Email (console backend)", to=to, subject=subject, html=html)
            return

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, partial(self._deliver, message))
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email", to=to, subject=subject, error=str(e))
            raise MailError(f"Failed to send email to {to}") from e

        logger.info("Email sent", to=to, subject=subject)

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            smtp.send_message(message)


def get_mail_transport() -> MailTransport:
    """Create the mail transport configured in settings."""
    return MailTransport(
        backend=settings.mail_backend,
        host=settings.mail_host,
        port=settings.mail_port,
        username=settings.mail_username,
        password=settings.mail_password,
        use_tls=settings.mail_use_tls,
    )
