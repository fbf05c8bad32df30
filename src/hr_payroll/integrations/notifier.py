from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    recipient: str
    subject: str
    body: str
    html: Optional[str] = None


class Notifier(Protocol):
    def send(self, message: Message) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 587
    user: str = ""
    password: str = ""
    from_address: str = ""


class SmtpNotifier:
    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    def send(self, message: Message) -> None:
        s = self._settings
        msg = EmailMessage()
        msg["Subject"] = message.subject
        msg["From"] = s.from_address or s.user
        msg["To"] = message.recipient
        msg.set_content(message.body)
        if message.html:
            msg.add_alternative(message.html, subtype="html")

        with smtplib.SMTP(s.host, s.port) as smtp:
            smtp.ehlo()
            if s.port in (587, 25):
                smtp.starttls()
                smtp.ehlo()
            if s.user and s.password:
                smtp.login(s.user, s.password)
            smtp.send_message(msg)


class LoggingNotifier:
    """Used when SMTP is not configured: the message only goes to the log."""

    def send(self, message: Message) -> None:
        logger.info("Mail to %s: %s", message.recipient, message.subject)


def otp_message(recipient: str, *, name: str, code: str, ttl_minutes: int) -> Message:
    return Message(
        recipient=recipient,
        subject="Your login OTP",
        body=f"Hello {name},\n\nYour one-time code is {code}. It expires in {ttl_minutes} minutes.\n",
    )


def welcome_message(recipient: str, *, name: str, employee_code: str, temp_password: str) -> Message:
    return Message(
        recipient=recipient,
        subject="Welcome - your account details",
        body=(
            f"Hello {name},\n\n"
            f"Your account has been created.\n"
            f"Employee ID: {employee_code}\n"
            f"Temporary password: {temp_password}\n\n"
            "Please change your password after the first login.\n"
        ),
    )
