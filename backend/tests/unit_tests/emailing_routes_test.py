from datetime import date
from typing import Any

import httpx
import pytest
from heliclockter import datetime_utc
from starlette.exceptions import HTTPException

from billiards.logic.emails import campaigns
from billiards.logic.emails.campaigns import EmailRecipient, FailedEmail, SendReport, SentEmail
from billiards.logic.emails.client import OutgoingEmail, ResendClient
from billiards.logic.emails.messages import build_envelope
from billiards.models.db.account import UserAccountType
from billiards.models.db.email_campaign import EmailTemplateKey
from billiards.models.db.tournament import TournamentResultWithPlayer, TournamentWithCategory
from billiards.models.db.user import UserPublic
from billiards.routes import emailing as emailing_routes
from billiards.utils.app_settings import EmailSettings
from billiards.utils.id_types import (
    CategoryId,
    EmailCampaignId,
    TournamentId,
    TournamentResultId,
    UserId,
)


def _build_admin_user() -> UserPublic:
    return UserPublic(
        id=UserId(7),
        username="admin",
        email="admin@example.com",
        created=datetime_utc.now(),
        account_type=UserAccountType.ADMIN,
    )


def _tournament(results_email_sent: bool) -> TournamentWithCategory:
    return TournamentWithCategory(
        id=TournamentId(4),
        category_id=CategoryId(2),
        tournament_number=1,
        season="2024-2025",
        tournament_date=date(2024, 10, 12),
        import_date=datetime_utc.now(),
        results_email_sent=results_email_sent,
        category_name="Libre R1",
        game_type="LIBRE",
        level="R1",
    )


@pytest.mark.asyncio
async def test_send_results_requires_email_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(emailing_routes.config, "resend_api_key", None)

    with pytest.raises(HTTPException) as exc_info:
        await emailing_routes.send_results(
            emailing_routes.SendResultsBody(tournament_id=TournamentId(4)), _build_admin_user()
        )

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_send_results_rejects_invalid_test_email(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(emailing_routes.config, "resend_api_key", "re_test")
    body = emailing_routes.SendResultsBody(
        tournament_id=TournamentId(4), test_mode=True, test_email="nope"
    )

    with pytest.raises(HTTPException) as exc_info:
        await emailing_routes.send_results(body, _build_admin_user())

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_send_results_refuses_when_already_sent(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_get_tournament(_: TournamentId) -> TournamentWithCategory:
        return _tournament(results_email_sent=True)

    monkeypatch.setattr(emailing_routes.config, "resend_api_key", "re_test")
    monkeypatch.setattr(emailing_routes, "sql_get_tournament_with_category", fake_get_tournament)

    with pytest.raises(HTTPException) as exc_info:
        await emailing_routes.send_results(
            emailing_routes.SendResultsBody(tournament_id=TournamentId(4)), _build_admin_user()
        )

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_send_finale_relance_refuses_when_already_sent(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_relance_sent(_: CategoryId, __: str) -> bool:
        return True

    monkeypatch.setattr(emailing_routes.config, "resend_api_key", "re_test")
    monkeypatch.setattr(emailing_routes, "sql_finale_relance_sent", fake_relance_sent)

    with pytest.raises(HTTPException) as exc_info:
        await emailing_routes.send_finale_relance(
            emailing_routes.FinaleEmailBody(category_id=CategoryId(2), season="2024-2025"),
            _build_admin_user(),
        )

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_get_finalists_requires_parameters() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await emailing_routes.get_finalists(None, "2024-2025", _build_admin_user())

    assert exc_info.value.status_code == 400


_EMAIL_SETTINGS = EmailSettings(
    email_communication="communication@example.org",
    email_convocations="convocations@example.org",
    email_noreply="noreply@example.org",
    email_sender_name="CDB",
    summary_email="",
    organization_name="Comité Départemental de Billard",
    organization_short_name="CDB",
)


def _install_results_campaign(
    monkeypatch: pytest.MonkeyPatch, report: SendReport, flagged: list[TournamentId]
) -> None:
    async def fake_get_tournament(_: TournamentId) -> TournamentWithCategory:
        return _tournament(results_email_sent=False)

    async def fake_get_results(tournament_id: TournamentId) -> list[TournamentResultWithPlayer]:
        return [
            TournamentResultWithPlayer(
                id=TournamentResultId(1),
                tournament_id=tournament_id,
                licence="0123456",
                player_name="MARTIN Jean",
                position=1,
                match_points=10,
                points=100,
                reprises=80,
                email="jean@example.org",
            )
        ]

    async def fake_rankings(_: CategoryId, __: str) -> tuple[list[Any], int]:
        return [], 0

    async def fake_email_settings() -> EmailSettings:
        return _EMAIL_SETTINGS

    async def fake_branding() -> dict[str, str]:
        return {"primary_color": "#1F4788"}

    async def fake_run_campaign(_: Any, **__: Any) -> SendReport:
        return report

    async def fake_set_sent(tournament_id: TournamentId) -> None:
        flagged.append(tournament_id)

    monkeypatch.setattr(emailing_routes.config, "resend_api_key", "re_test")
    monkeypatch.setattr(emailing_routes, "sql_get_tournament_with_category", fake_get_tournament)
    monkeypatch.setattr(emailing_routes, "sql_get_tournament_results", fake_get_results)
    monkeypatch.setattr(emailing_routes, "get_rankings_with_qualification", fake_rankings)
    monkeypatch.setattr(emailing_routes, "get_email_settings", fake_email_settings)
    monkeypatch.setattr(emailing_routes, "get_branding_settings", fake_branding)
    monkeypatch.setattr(emailing_routes, "_run_campaign", fake_run_campaign)
    monkeypatch.setattr(emailing_routes, "sql_set_results_email_sent", fake_set_sent)


@pytest.mark.asyncio
async def test_send_results_keeps_flag_unset_when_nothing_was_delivered(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    flagged: list[TournamentId] = []
    report = SendReport(
        failed=[FailedEmail(name="MARTIN Jean", email="jean@example.org", error="rate limited")]
    )
    _install_results_campaign(monkeypatch, report, flagged)

    result = await emailing_routes.send_results(
        emailing_routes.SendResultsBody(tournament_id=TournamentId(4)), _build_admin_user()
    )

    assert len(result.results.failed) == 1
    assert flagged == []


@pytest.mark.asyncio
async def test_send_results_sets_flag_after_delivery(monkeypatch: pytest.MonkeyPatch) -> None:
    flagged: list[TournamentId] = []
    report = SendReport(sent=[SentEmail(name="MARTIN Jean", email="jean@example.org")])
    _install_results_campaign(monkeypatch, report, flagged)

    await emailing_routes.send_results(
        emailing_routes.SendResultsBody(tournament_id=TournamentId(4)), _build_admin_user()
    )

    assert flagged == [TournamentId(4)]


class _CampaignLog:
    def __init__(self) -> None:
        self.completed: list[tuple[EmailCampaignId, int, int]] = []

    async def create(self, **_: Any) -> EmailCampaignId:
        return EmailCampaignId(11)

    async def complete(self, campaign_id: EmailCampaignId, sent: int, failed: int) -> None:
        self.completed.append((campaign_id, sent, failed))


def _install_campaign_log(monkeypatch: pytest.MonkeyPatch, log: _CampaignLog) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="queued")

    async def no_sleep(_: float) -> None:
        return None

    monkeypatch.setattr(emailing_routes, "sql_create_email_campaign", log.create)
    monkeypatch.setattr(emailing_routes, "sql_complete_email_campaign", log.complete)
    monkeypatch.setattr(
        emailing_routes,
        "get_email_client",
        lambda: ResendClient("re_test", transport=httpx.MockTransport(handler)),
    )
    monkeypatch.setattr(campaigns.asyncio, "sleep", no_sleep)


async def _run_results_campaign() -> SendReport:
    def build_email(recipient: EmailRecipient) -> OutgoingEmail:
        return OutgoingEmail(
            sender="CDB <noreply@example.org>",
            to=[(recipient.email or "").strip()],
            subject="Résultats",
            html="<p>ok</p>",
        )

    return await emailing_routes._run_campaign(
        emailing_routes.SendResultsBody(tournament_id=TournamentId(4)),
        recipients=[
            EmailRecipient(name="A", email="a@example.org"),
            EmailRecipient(name="B", email="b@example.org"),
        ],
        build_email=build_email,
        envelope=build_envelope(_EMAIL_SETTINGS, {"primary_color": "#1F4788"}),
        subject="Résultats",
        summary_subtitle="Libre R1",
        template_key=EmailTemplateKey.TOURNAMENT_RESULTS,
        tournament_id=TournamentId(4),
    )


@pytest.mark.asyncio
async def test_run_campaign_completes_the_campaign(monkeypatch: pytest.MonkeyPatch) -> None:
    log = _CampaignLog()
    _install_campaign_log(monkeypatch, log)

    report = await _run_results_campaign()

    assert len(report.sent) == 2
    assert log.completed == [(EmailCampaignId(11), 2, 0)]


@pytest.mark.asyncio
async def test_run_campaign_completes_the_campaign_when_sending_aborts(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    log = _CampaignLog()
    _install_campaign_log(monkeypatch, log)

    async def broken_send(*_: Any, **__: Any) -> SendReport:
        raise RuntimeError("connection pool closed")

    monkeypatch.setattr(emailing_routes, "send_sequentially", broken_send)

    with pytest.raises(RuntimeError):
        await _run_results_campaign()

    assert log.completed == [(EmailCampaignId(11), 0, 0)]
