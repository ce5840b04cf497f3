import smtplib

import pytest

from src.doposcuola.doposcuola.core.exceptions import MailDeliveryError
from src.doposcuola.doposcuola.mail.mailer import LoggingMailer, MailConfig, SMTPMailer, build_mailer


def test_no_host_means_logging_mailer():
    assert isinstance(build_mailer({}), LoggingMailer)
    assert isinstance(build_mailer({"host": "smtp.example.com"}), SMTPMailer)


def test_smtp_failure_becomes_mail_delivery_error(monkeypatch):
    class Refusing:
        def __init__(self, *args, **kwargs):
            raise smtplib.SMTPConnectError(421, "try later")

    monkeypatch.setattr(smtplib, "SMTP", Refusing)
    mailer = SMTPMailer(MailConfig(host="smtp.example.com", port=587))

    with pytest.raises(MailDeliveryError):
        mailer.send(to="a@example.com", subject="s", text="t")


def test_smtp_send(monkeypatch):
    sent = []

    class FakeSMTP:
        def __init__(self, host, port, timeout=None):
            self.host = host

        def starttls(self, context=None):
            sent.append("tls")

        def login(self, username, password):
            sent.append(("login", username))

        def sendmail(self, sender, recipients, message):
            sent.append((sender, recipients))

        def quit(self):
            sent.append("quit")

    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    config = MailConfig(host="smtp.example.com", username="bot", password="pw", from_address="Portal <bot@example.com>")
    SMTPMailer(config).send(to="a@example.com", subject="s", text="t")

    assert sent == ["tls", ("login", "bot"), ("bot@example.com", ["a@example.com"]), "quit"]
