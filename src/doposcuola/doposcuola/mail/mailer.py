"""Outgoing mail for login codes, magic links and password recovery.

SMTP when a host is configured; otherwise messages are written to the log so
a development setup can still complete the OTP flow.
"""

from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from ..core.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, *, to: str, subject: str, text: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class MailConfig:
    host: str = ""
    port: int = 587
    username: str = ""
    password: str = ""
    use_tls: bool = True
    from_address: str = "Doposcuola Connect <no-reply@doposcuola.local>"

    @classmethod
    def from_dict(cls, mail_config: dict) -> "MailConfig":
        return cls(
            host=str(mail_config.get("host") or ""),
            port=int(mail_config.get("port") or 587),
            username=str(mail_config.get("username") or ""),
            password=str(mail_config.get("password") or ""),
            use_tls=bool(mail_config.get("use_tls", True)),
            from_address=str(mail_config.get("from_address") or cls.from_address),
        )


class SMTPMailer(Mailer):
    def __init__(self, config: MailConfig):
        self._config = config

    def send(self, *, to: str, subject: str, text: str) -> None:
        cfg = self._config
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = cfg.from_address
        msg["To"] = to
        msg.attach(MIMEText(text, "plain", "utf-8"))

        try:
            if cfg.port == 465:
                server = smtplib.SMTP_SSL(cfg.host, cfg.port, context=ssl.create_default_context(), timeout=30)
            else:
                server = smtplib.SMTP(cfg.host, cfg.port, timeout=30)
                if cfg.use_tls:
                    server.starttls(context=ssl.create_default_context())
            try:
                if cfg.username:
                    server.login(cfg.username, cfg.password)
                server.sendmail(cfg.from_address.split("<")[-1].rstrip(">"), [to], msg.as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP send to %s failed: %s", to, e)
            raise MailDeliveryError("Error sending email. Rate limit exceeded or SMTP error.") from e

        logger.info("Mail '%s' sent to %s via %s", subject, to, cfg.host)


class LoggingMailer(Mailer):
    """Development mailer: the message body goes to the log."""

    def send(self, *, to: str, subject: str, text: str) -> None:
        logger.warning("No SMTP host configured; mail to %s\nSubject: %s\n\n%s", to, subject, text)


def build_mailer(mail_config: dict) -> Mailer:
    config = MailConfig.from_dict(mail_config or {})
    if not config.host:
        return LoggingMailer()
    return SMTPMailer(config)


def login_code_message(*, code: str, link: str) -> tuple[str, str]:
    subject = "Your Doposcuola Connect login code"
    text = (
        f"Your one-time code is: {code}\n\n"
        f"Or sign in directly with this link:\n{link}\n\n"
        "The code and the link expire in 10 minutes and can be used once."
    )
    return subject, text


def recovery_message(*, link: str) -> tuple[str, str]:
    subject = "Reset your Doposcuola Connect password"
    text = (
        "Someone asked to reset the password for this address.\n\n"
        f"Open this link to choose a new password:\n{link}\n\n"
        "If it was not you, ignore this message."
    )
    return subject, text
