from datetime import date

from pydantic import BaseModel

from billiards.logic.emails.client import OutgoingEmail
from billiards.logic.emails.templates import (
    RANKING_COLOR,
    EmailLayout,
    TableRow,
    format_moyenne,
    qualification_message,
    render_finalist_email,
    render_results_email,
    render_summary_email,
    render_table,
    render_template,
    substitute_tokens,
)
from billiards.logic.reconciliation import split_player_name
from billiards.models.db.ranking import RankingWithPlayer
from billiards.models.db.tournament import TournamentResultWithPlayer, TournamentWithCategory
from billiards.utils.app_settings import EmailSettings

LAST_REGULAR_TOURNAMENT_NUMBER = 3


class EmailEnvelope(BaseModel):
    sender: str
    reply_to: str | None
    layout: EmailLayout


def build_envelope(
    email_settings: EmailSettings, branding: dict[str, str], *, convocation: bool = False
) -> EmailEnvelope:
    address = (
        email_settings.email_convocations if convocation else email_settings.email_communication
    )
    return EmailEnvelope(
        sender=f"{email_settings.email_sender_name} <{address}>",
        reply_to=email_settings.summary_email or None,
        layout=EmailLayout(
            organization_name=email_settings.organization_name,
            primary_color=branding["primary_color"],
            contact_email=email_settings.summary_email or address,
        ),
    )


def format_date(value: date | None) -> str:
    return value.strftime("%d/%m/%Y") if value is not None else ""


def player_display_name(ranking: RankingWithPlayer) -> str:
    name = f"{ranking.last_name or ''} {ranking.first_name or ''}".strip()
    return name or ranking.licence


class ResultsEmailContent(BaseModel):
    tournament: TournamentWithCategory
    results: list[TournamentResultWithPlayer]
    rankings: list[RankingWithPlayer]
    intro_text: str
    outro_text: str

    @property
    def subject(self) -> str:
        date_label = format_date(self.tournament.tournament_date)
        return f"Résultats - {self.tournament.category_name} - {date_label}"

    @property
    def subtitle(self) -> str:
        date_label = format_date(self.tournament.tournament_date)
        if self.tournament.location:
            return f"{date_label} - {self.tournament.location}"
        return date_label


def build_results_email(
    content: ResultsEmailContent,
    participant: TournamentResultWithPlayer,
    to: str,
    envelope: EmailEnvelope,
) -> OutgoingEmail:
    """Personalised results email: the recipient's rows are highlighted in both tables."""
    licence = participant.licence.replace(" ", "")
    results_table = render_table(
        ["Pos", "Joueur", "Pts match", "Moyenne"],
        [
            TableRow(
                cells=[
                    result.position,
                    result.player_name,
                    result.match_points,
                    format_moyenne(result.points, result.reprises),
                ],
                highlighted=result.licence.replace(" ", "") == licence,
            )
            for result in content.results
        ],
        envelope.layout.primary_color,
    )
    rankings_table = render_table(
        ["Pos", "Joueur", "Pts match", "Moyenne"],
        [
            TableRow(
                cells=[
                    ranking.rank_position,
                    player_display_name(ranking),
                    ranking.total_match_points,
                    f"{ranking.avg_moyenne:.3f}",
                ],
                highlighted=ranking.licence == licence,
            )
            for ranking in content.rankings
        ],
        RANKING_COLOR,
    )

    player_ranking = next((r for r in content.rankings if r.licence == licence), None)
    fallback_last_name, fallback_first_name = split_player_name(participant.player_name)
    values = {
        "first_name": participant.first_name or fallback_first_name,
        "last_name": participant.last_name or fallback_last_name,
        "player_name": participant.player_name,
        "tournament_name": content.tournament.category_name,
        "tournament_date": format_date(content.tournament.tournament_date),
        "tournament_lieu": content.tournament.location or "",
        "player_position": participant.position,
        "player_points": participant.match_points,
        "ranking_position": player_ranking.rank_position if player_ranking is not None else "-",
    }

    html = render_results_email(
        envelope.layout,
        title=f"Résultats - {content.tournament.category_name}",
        subtitle=content.subtitle,
        intro_html=render_template(content.intro_text, values),
        outro_html=render_template(content.outro_text, values),
        results_table=results_table,
        rankings_heading=f"Classement général {content.tournament.category_name}",
        rankings_table=rankings_table,
        qualification_html=qualification_message(
            qualified=player_ranking is not None and player_ranking.qualified,
            definitive=content.tournament.tournament_number == LAST_REGULAR_TOURNAMENT_NUMBER,
        ),
    )
    return OutgoingEmail(
        sender=envelope.sender,
        to=[to],
        subject=content.subject,
        html=html,
        reply_to=envelope.reply_to,
    )


class FinaleEmailContent(BaseModel):
    category_name: str
    season: str
    finalists: list[RankingWithPlayer]
    finale_date: date | None = None
    finale_location: str | None = None
    subject: str
    intro_text: str
    outro_text: str


def build_finalist_email(
    content: FinaleEmailContent,
    finalist: RankingWithPlayer,
    to: str,
    envelope: EmailEnvelope,
) -> OutgoingEmail:
    finalists_table = render_table(
        ["Rang", "Joueur", "Club", "Pts match", "Moyenne"],
        [
            TableRow(
                cells=[
                    ranking.rank_position,
                    player_display_name(ranking),
                    ranking.club or "",
                    ranking.total_match_points,
                    f"{ranking.avg_moyenne:.3f}",
                ],
                highlighted=ranking.licence == finalist.licence,
            )
            for ranking in content.finalists
        ],
        envelope.layout.primary_color,
    )
    values = {
        "first_name": finalist.first_name or "",
        "last_name": finalist.last_name or "",
        "player_name": player_display_name(finalist),
        "category": content.category_name,
        "season": content.season,
        "rank_position": finalist.rank_position,
        "finale_date": format_date(content.finale_date),
        "finale_lieu": content.finale_location or "",
    }
    subtitle = " - ".join(
        part for part in (format_date(content.finale_date), content.finale_location or "") if part
    )
    html = render_finalist_email(
        envelope.layout,
        title=f"Finale {content.category_name} - {content.season}",
        subtitle=subtitle,
        intro_html=render_template(content.intro_text, values),
        outro_html=render_template(content.outro_text, values),
        finalists_table=finalists_table,
    )
    return OutgoingEmail(
        sender=envelope.sender,
        to=[to],
        subject=substitute_tokens(content.subject, values),
        html=html,
        reply_to=envelope.reply_to,
    )


def build_summary_email(
    envelope: EmailEnvelope,
    to: str,
    *,
    subject: str,
    subtitle: str,
    sent: list[tuple[str, str]],
    failed_count: int,
    skipped_count: int,
) -> OutgoingEmail:
    html = render_summary_email(
        envelope.layout,
        title=f"Récapitulatif - {subject}",
        subtitle=subtitle,
        sent=sent,
        failed_count=failed_count,
        skipped_count=skipped_count,
    )
    return OutgoingEmail(
        sender=envelope.sender,
        to=[to],
        subject=f"Récapitulatif - {subject}",
        html=html,
        reply_to=envelope.reply_to,
    )
