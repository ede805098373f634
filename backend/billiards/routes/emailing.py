from collections.abc import Callable
from datetime import date

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from starlette import status

from billiards.config import config
from billiards.logic.emails.campaigns import (
    EmailRecipient,
    SendReport,
    is_valid_email,
    send_sequentially,
)
from billiards.logic.emails.client import OutgoingEmail, get_email_client
from billiards.logic.emails.messages import (
    EmailEnvelope,
    FinaleEmailContent,
    ResultsEmailContent,
    build_envelope,
    build_finalist_email,
    build_results_email,
    build_summary_email,
    player_display_name,
)
from billiards.logic.ranking.qualification import select_finalists
from billiards.logic.ranking.standings import get_rankings_with_qualification
from billiards.models.db.category import Category
from billiards.models.db.email_campaign import EmailTemplateKey
from billiards.models.db.ranking import RankingWithPlayer
from billiards.models.db.shared import BaseModelORM
from billiards.models.db.tournament import FINALE_TOURNAMENT_NUMBER, TournamentWithCategory
from billiards.models.db.user import UserPublic
from billiards.routes.auth import is_admin_user, user_authenticated
from billiards.routes.models import (
    EmailCampaignsResponse,
    EmailSendResult,
    FinalistsResponse,
    FinalistsView,
    TournamentEmailPreview,
    TournamentEmailPreviewResponse,
)
from billiards.sql.categories import sql_get_category
from billiards.sql.email_campaigns import (
    sql_complete_email_campaign,
    sql_create_email_campaign,
    sql_finale_relance_sent,
    sql_get_email_campaigns,
    sql_mark_finale_relance_sent,
)
from billiards.sql.tournaments import (
    sql_get_tournament_results,
    sql_get_tournament_with_category,
    sql_get_tournaments,
    sql_set_results_email_sent,
)
from billiards.utils.app_settings import (
    get_branding_settings,
    get_email_settings,
    get_qualification_settings,
)
from billiards.utils.id_types import CategoryId, TournamentId
from billiards.utils.logging import logger
from billiards.utils.types import assert_some

router = APIRouter(prefix=config.api_prefix)


class EmailSendBody(BaseModelORM):
    intro_text: str = ""
    outro_text: str = ""
    test_mode: bool = False
    test_email: str | None = None
    cc_email: str | None = None
    force: bool = False


class SendResultsBody(EmailSendBody):
    tournament_id: TournamentId


class FinaleEmailBody(EmailSendBody):
    category_id: CategoryId
    season: str
    subject: str | None = None
    finale_date: date | None = None
    finale_location: str | None = None


def _require_admin(user_public: UserPublic) -> None:
    if not is_admin_user(user_public):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Admin access required")


def _require_email_configured(body: EmailSendBody) -> None:
    if not config.resend_api_key:
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Email not configured: set RESEND_API_KEY"
        )
    if body.test_mode and not is_valid_email(body.test_email):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Invalid test email")


async def _tournament_or_404(tournament_id: TournamentId) -> TournamentWithCategory:
    tournament = await sql_get_tournament_with_category(tournament_id)
    if tournament is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Tournament not found")
    return tournament


async def _category_or_404(category_id: CategoryId) -> Category:
    category = await sql_get_category(category_id)
    if category is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Category not found")
    return category


async def _run_campaign(
    body: EmailSendBody,
    *,
    recipients: list[EmailRecipient],
    build_email: Callable[[EmailRecipient], OutgoingEmail],
    envelope: EmailEnvelope,
    subject: str,
    summary_subtitle: str,
    template_key: EmailTemplateKey,
    tournament_id: TournamentId | None = None,
) -> SendReport:
    """Record a campaign, send it sequentially and mail a summary to the CC address."""
    if body.test_mode:
        recipients = [recipients[0].model_copy(update={"email": body.test_email})]

    campaign_id = await sql_create_email_campaign(
        subject=subject,
        body=body.intro_text,
        template_key=template_key,
        recipients_count=sum(1 for r in recipients if is_valid_email(r.email)),
        tournament_id=tournament_id,
    )

    report = SendReport()
    try:
        async with assert_some(get_email_client()) as client:
            report = await send_sequentially(
                client, recipients, build_email, delay_seconds=config.email_send_delay_seconds
            )

            if not body.test_mode and is_valid_email(body.cc_email) and len(report.sent) > 0:
                summary = build_summary_email(
                    envelope,
                    assert_some(body.cc_email).strip(),
                    subject=subject,
                    subtitle=summary_subtitle,
                    sent=[(sent.name, sent.email) for sent in report.sent],
                    failed_count=len(report.failed),
                    skipped_count=len(report.skipped),
                )
                try:
                    await client.send(summary)
                except httpx.HTTPError:
                    logger.exception(
                        "Could not send campaign summary: campaign_id=%s", campaign_id
                    )
    finally:
        await sql_complete_email_campaign(campaign_id, len(report.sent), len(report.failed))

    logger.info(
        "Email campaign done: campaign_id=%s template=%s sent=%s failed=%s skipped=%s",
        campaign_id,
        template_key.value,
        len(report.sent),
        len(report.failed),
        len(report.skipped),
    )
    return report


def _send_result(body: EmailSendBody, report: SendReport) -> EmailSendResult:
    if body.test_mode:
        message = f"Test email sent to {body.test_email}"
    else:
        message = (
            f"Sent: {len(report.sent)}, failed: {len(report.failed)}, "
            f"skipped: {len(report.skipped)}"
        )
    return EmailSendResult(message=message, results=report, test_mode=body.test_mode)


@router.get(
    "/emailing/tournament-results/{tournament_id}",
    response_model=TournamentEmailPreviewResponse,
)
async def get_tournament_results_preview(
    tournament_id: TournamentId,
    _: UserPublic = Depends(user_authenticated),
) -> TournamentEmailPreviewResponse:
    tournament = await _tournament_or_404(tournament_id)
    results = await sql_get_tournament_results(tournament_id)
    rankings, qualified_count = await get_rankings_with_qualification(
        tournament.category_id, tournament.season
    )
    return TournamentEmailPreviewResponse(
        data=TournamentEmailPreview(
            tournament=tournament,
            results=results,
            rankings=rankings,
            email_count=sum(1 for result in results if is_valid_email(result.email)),
            qualified_count=qualified_count,
        )
    )


@router.post("/emailing/send-results", response_model=EmailSendResult)
async def send_results(
    body: SendResultsBody,
    user_public: UserPublic = Depends(user_authenticated),
) -> EmailSendResult:
    _require_admin(user_public)
    _require_email_configured(body)
    tournament = await _tournament_or_404(body.tournament_id)

    if tournament.results_email_sent and not body.test_mode and not body.force:
        raise HTTPException(
            status.HTTP_409_CONFLICT, "Results email was already sent for this tournament"
        )

    results = await sql_get_tournament_results(body.tournament_id)
    if len(results) < 1:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "No results found for this tournament")

    rankings, _qualified_count = await get_rankings_with_qualification(
        tournament.category_id, tournament.season
    )
    content = ResultsEmailContent(
        tournament=tournament,
        results=results,
        rankings=rankings,
        intro_text=body.intro_text,
        outro_text=body.outro_text,
    )
    envelope = build_envelope(await get_email_settings(), await get_branding_settings())
    results_by_licence = {result.licence: result for result in results}

    report = await _run_campaign(
        body,
        recipients=[
            EmailRecipient(name=result.player_name, email=result.email, licence=result.licence)
            for result in results
        ],
        build_email=lambda recipient: build_results_email(
            content,
            results_by_licence[assert_some(recipient.licence)],
            assert_some(recipient.email).strip(),
            envelope,
        ),
        envelope=envelope,
        subject=content.subject,
        summary_subtitle=content.subtitle,
        template_key=EmailTemplateKey.TOURNAMENT_RESULTS,
        tournament_id=body.tournament_id,
    )

    if not body.test_mode and len(report.sent) > 0:
        await sql_set_results_email_sent(body.tournament_id)

    return _send_result(body, report)


async def _get_finalists(
    category_id: CategoryId, season: str
) -> tuple[list[RankingWithPlayer], list[RankingWithPlayer], int]:
    rankings, qualified_count = await get_rankings_with_qualification(category_id, season)
    finalists = select_finalists(rankings, await get_qualification_settings())
    return rankings, finalists, qualified_count


@router.get("/emailing/finalists", response_model=FinalistsResponse)
async def get_finalists(
    category_id: CategoryId | None = Query(default=None, alias="categoryId"),
    season: str | None = Query(default=None),
    _: UserPublic = Depends(user_authenticated),
) -> FinalistsResponse:
    if category_id is None or not season:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "categoryId and season are required")

    category = await _category_or_404(category_id)
    rankings, finalists, qualified_count = await _get_finalists(category_id, season)
    return FinalistsResponse(
        data=FinalistsView(
            category=category,
            season=season,
            total_players=len(rankings),
            qualified_count=qualified_count,
            finalists=finalists,
            email_count=sum(1 for finalist in finalists if is_valid_email(finalist.email)),
        )
    )


async def _send_finale_email(
    body: FinaleEmailBody, template_key: EmailTemplateKey, default_subject: str
) -> tuple[SendReport, list[RankingWithPlayer]]:
    category = await _category_or_404(body.category_id)
    _rankings, finalists, _qualified_count = await _get_finalists(body.category_id, body.season)
    if len(finalists) < 1:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, "No finalists for this category and season"
        )

    finale = next(
        (
            tournament
            for tournament in await sql_get_tournaments(body.season, body.category_id)
            if tournament.tournament_number == FINALE_TOURNAMENT_NUMBER
        ),
        None,
    )
    content = FinaleEmailContent(
        category_name=category.display_name,
        season=body.season,
        finalists=finalists,
        finale_date=body.finale_date or (finale.tournament_date if finale else None),
        finale_location=body.finale_location or (finale.location if finale else None),
        subject=body.subject or default_subject,
        intro_text=body.intro_text,
        outro_text=body.outro_text,
    )
    envelope = build_envelope(
        await get_email_settings(), await get_branding_settings(), convocation=True
    )
    finalists_by_licence = {finalist.licence: finalist for finalist in finalists}

    report = await _run_campaign(
        body,
        recipients=[
            EmailRecipient(
                name=player_display_name(finalist), email=finalist.email, licence=finalist.licence
            )
            for finalist in finalists
        ],
        build_email=lambda recipient: build_finalist_email(
            content,
            finalists_by_licence[assert_some(recipient.licence)],
            assert_some(recipient.email).strip(),
            envelope,
        ),
        envelope=envelope,
        subject=content.subject.replace("{category}", category.display_name),
        summary_subtitle=f"{category.display_name} - {body.season}",
        template_key=template_key,
    )
    return report, finalists


@router.post("/emailing/send-finale-convocation", response_model=EmailSendResult)
async def send_finale_convocation(
    body: FinaleEmailBody,
    user_public: UserPublic = Depends(user_authenticated),
) -> EmailSendResult:
    _require_admin(user_public)
    _require_email_configured(body)
    report, _finalists = await _send_finale_email(
        body, EmailTemplateKey.FINALE_CONVOCATION, "Convocation Finale {category}"
    )
    return _send_result(body, report)


@router.post("/emailing/send-finale-relance", response_model=EmailSendResult)
async def send_finale_relance(
    body: FinaleEmailBody,
    user_public: UserPublic = Depends(user_authenticated),
) -> EmailSendResult:
    _require_admin(user_public)
    _require_email_configured(body)

    if (
        not body.test_mode
        and not body.force
        and await sql_finale_relance_sent(body.category_id, body.season)
    ):
        raise HTTPException(
            status.HTTP_409_CONFLICT, "Finale reminder was already sent for this category"
        )

    report, finalists = await _send_finale_email(
        body, EmailTemplateKey.FINALE_RELANCE, "Rappel - Finale {category}"
    )
    if not body.test_mode and len(report.sent) > 0:
        await sql_mark_finale_relance_sent(body.category_id, body.season, len(finalists))

    return _send_result(body, report)


@router.get("/emailing/history", response_model=EmailCampaignsResponse)
async def get_email_history(
    user_public: UserPublic = Depends(user_authenticated),
) -> EmailCampaignsResponse:
    _require_admin(user_public)
    return EmailCampaignsResponse(data=await sql_get_email_campaigns())
