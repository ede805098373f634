import json

import httpx
import pytest

from billiards.logic.emails import campaigns
from billiards.logic.emails.campaigns import EmailRecipient, is_valid_email, send_sequentially
from billiards.logic.emails.client import OutgoingEmail, ResendClient


class _FakeClient:
    def __init__(self, failing: set[str]) -> None:
        self.failing = failing
        self.sent: list[str] = []

    async def send(self, email: OutgoingEmail) -> str:
        if email.to[0] in self.failing:
            raise httpx.HTTPStatusError(
                "rate limited",
                request=httpx.Request("POST", "https://api.resend.com/emails"),
                response=httpx.Response(429),
            )
        self.sent.append(email.to[0])
        return "id"


def _build_email(recipient: EmailRecipient) -> OutgoingEmail:
    return OutgoingEmail(
        sender="CDB <noreply@example.org>",
        to=[(recipient.email or "").strip()],
        subject="Résultats",
        html="<p>ok</p>",
    )


def test_is_valid_email() -> None:
    assert is_valid_email("jean.martin@example.org")
    assert is_valid_email("  jean@example.org ")
    assert not is_valid_email("jean@example")
    assert not is_valid_email("not an email")
    assert not is_valid_email("")
    assert not is_valid_email(None)


@pytest.mark.asyncio
async def test_send_sequentially_reports_each_recipient(monkeypatch: pytest.MonkeyPatch) -> None:
    pauses: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        pauses.append(seconds)

    monkeypatch.setattr(campaigns.asyncio, "sleep", fake_sleep)
    client = _FakeClient(failing={"fail@example.org"})
    recipients = [
        EmailRecipient(name="A", email="a@example.org"),
        EmailRecipient(name="B", email=None),
        EmailRecipient(name="C", email="fail@example.org"),
        EmailRecipient(name="D", email="d@example.org"),
    ]

    report = await send_sequentially(
        client, recipients, _build_email, delay_seconds=1.5  # type: ignore[arg-type]
    )

    assert [sent.email for sent in report.sent] == ["a@example.org", "d@example.org"]
    assert [failed.email for failed in report.failed] == ["fail@example.org"]
    assert [skipped.name for skipped in report.skipped] == ["B"]
    assert client.sent == ["a@example.org", "d@example.org"]
    # No pause after a skipped recipient nor after the last one.
    assert pauses == [1.5, 1.5]


@pytest.mark.asyncio
async def test_resend_client_posts_email() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "email-123"})

    async with ResendClient(
        "re_test",
        api_url="https://api.resend.test/emails",
        transport=httpx.MockTransport(handler),
    ) as client:
        email_id = await client.send(
            OutgoingEmail(
                sender="CDB <noreply@example.org>",
                to=["jean@example.org"],
                subject="Résultats",
                html="<p>ok</p>",
            )
        )

    assert email_id == "email-123"
    assert captured[0].headers["Authorization"] == "Bearer re_test"
    payload = json.loads(captured[0].content)
    assert payload == {
        "from": "CDB <noreply@example.org>",
        "to": ["jean@example.org"],
        "subject": "Résultats",
        "html": "<p>ok</p>",
    }


@pytest.mark.asyncio
async def test_resend_client_raises_on_error_status() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "invalid"})

    async with ResendClient(
        "re_test", api_url="https://api.resend.test/emails", transport=httpx.MockTransport(handler)
    ) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.send(
                OutgoingEmail(sender="a@example.org", to=["b@example.org"], subject="s", html="h")
            )


@pytest.mark.asyncio
async def test_send_sequentially_accepts_non_json_success_body(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def no_sleep(_: float) -> None:
        return None

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="queued")

    monkeypatch.setattr(campaigns.asyncio, "sleep", no_sleep)
    recipients = [
        EmailRecipient(name="A", email="a@example.org"),
        EmailRecipient(name="B", email="b@example.org"),
    ]

    async with ResendClient(
        "re_test", api_url="https://api.resend.test/emails", transport=httpx.MockTransport(handler)
    ) as client:
        report = await send_sequentially(client, recipients, _build_email, delay_seconds=0.6)

    assert [sent.email for sent in report.sent] == ["a@example.org", "b@example.org"]
    assert report.failed == []


@pytest.mark.asyncio
async def test_send_sequentially_continues_after_template_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def no_sleep(_: float) -> None:
        return None

    def build_email(recipient: EmailRecipient) -> OutgoingEmail:
        if recipient.name == "B":
            raise KeyError("licence")
        return _build_email(recipient)

    monkeypatch.setattr(campaigns.asyncio, "sleep", no_sleep)
    client = _FakeClient(failing=set())
    recipients = [
        EmailRecipient(name="A", email="a@example.org"),
        EmailRecipient(name="B", email="b@example.org"),
        EmailRecipient(name="C", email="c@example.org"),
    ]

    report = await send_sequentially(client, recipients, build_email, delay_seconds=0.6)

    assert client.sent == ["a@example.org", "c@example.org"]
    assert [(failed.name, failed.email) for failed in report.failed] == [("B", "b@example.org")]
    assert "licence" in report.failed[0].error
