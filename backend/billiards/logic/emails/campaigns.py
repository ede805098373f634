import asyncio
import re
from collections.abc import Callable, Sequence

import httpx
from pydantic import BaseModel

from billiards.logic.emails.client import OutgoingEmail, ResendClient
from billiards.models.db.shared import BaseModelORM
from billiards.utils.logging import logger

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class EmailRecipient(BaseModel):
    name: str
    email: str | None
    licence: str | None = None


class SentEmail(BaseModelORM):
    name: str
    email: str


class FailedEmail(BaseModelORM):
    name: str
    email: str
    error: str


class SkippedEmail(BaseModelORM):
    name: str
    reason: str


class SendReport(BaseModelORM):
    sent: list[SentEmail] = []
    failed: list[FailedEmail] = []
    skipped: list[SkippedEmail] = []


def is_valid_email(value: str | None) -> bool:
    return value is not None and _EMAIL_PATTERN.match(value.strip()) is not None


async def send_sequentially(
    client: ResendClient,
    recipients: Sequence[EmailRecipient],
    build_email: Callable[[EmailRecipient], OutgoingEmail],
    *,
    delay_seconds: float,
) -> SendReport:
    """
    Send one email per recipient, one at a time, pausing `delay_seconds` between sends to
    stay under the provider's rate limit. A failed send is recorded and the loop moves on.
    """
    report = SendReport()

    for index, recipient in enumerate(recipients):
        if recipient.email is None or not is_valid_email(recipient.email):
            report.skipped.append(
                SkippedEmail(name=recipient.name, reason="Missing or invalid email")
            )
            continue

        email = recipient.email.strip()
        try:
            await client.send(build_email(recipient))
        except httpx.HTTPError as exc:
            logger.warning("Email delivery failed: recipient=%s error=%s", email, exc)
            report.failed.append(FailedEmail(name=recipient.name, email=email, error=str(exc)))
        except Exception as exc:
            logger.exception("Could not build or send email: recipient=%s", email)
            report.failed.append(FailedEmail(name=recipient.name, email=email, error=str(exc)))
        else:
            report.sent.append(SentEmail(name=recipient.name, email=email))

        if index < len(recipients) - 1:
            await asyncio.sleep(delay_seconds)

    return report
