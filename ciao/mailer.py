"""Outbound mail.

Delivery is left to whatever is wired in behind ``Mailer``; the default
implementation only logs what would have been sent.
"""
import logging
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)


@dataclass
class OutgoingMessage:
    to: str
    subject: str
    body: str


class Mailer:
    def send(self, to: str, subject: str, body: str) -> None:
        raise NotImplementedError


class LoggingMailer(Mailer):
    """Keeps sent messages in memory and writes a log line for each."""

    def __init__(self):
        self.outbox: List[OutgoingMessage] = []

    def send(self, to: str, subject: str, body: str) -> None:
        self.outbox.append(OutgoingMessage(to=to, subject=subject, body=body))
        logger.info("Mail to %s: %s", to, subject)


_mailer = LoggingMailer()


def get_mailer() -> Mailer:
    return _mailer
