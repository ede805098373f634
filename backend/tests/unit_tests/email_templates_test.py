from datetime import date

from heliclockter import datetime_utc

from billiards.logic.emails.messages import (
    EmailEnvelope,
    ResultsEmailContent,
    build_results_email,
    format_date,
)
from billiards.logic.emails.templates import (
    EmailLayout,
    format_moyenne,
    qualification_message,
    render_template,
    substitute_tokens,
)
from billiards.models.db.ranking import RankingWithPlayer
from billiards.models.db.tournament import TournamentResultWithPlayer, TournamentWithCategory
from billiards.utils.id_types import CategoryId, RankingId, TournamentId, TournamentResultId

_ENVELOPE = EmailEnvelope(
    sender="CDB <communication@example.org>",
    reply_to=None,
    layout=EmailLayout(
        organization_name="CDB", primary_color="#1F4788", contact_email="contact@example.org"
    ),
)


def test_render_template_escapes_text_and_values() -> None:
    rendered = render_template(
        "Bonjour {first_name} <b>\n{unknown}", {"first_name": "Jean & <script>"}
    )

    assert rendered == "Bonjour Jean &amp; &lt;script&gt; &lt;b&gt;<br>{unknown}"


def test_substitute_tokens_leaves_text_unescaped() -> None:
    assert substitute_tokens("Finale {category} & co", {"category": "Libre R1"}) == (
        "Finale Libre R1 & co"
    )


def test_format_helpers() -> None:
    assert format_moyenne(150, 100) == "1.500"
    assert format_moyenne(10, 0) == "-"
    assert format_date(date(2025, 2, 15)) == "15/02/2025"
    assert format_date(None) == ""


def test_qualification_message_variants() -> None:
    assert "Félicitations" in qualification_message(qualified=True, definitive=True)
    assert "pas sélectionné" in qualification_message(qualified=False, definitive=True)
    assert "éligible pour la finale" in qualification_message(qualified=True, definitive=False)
    assert "à ce stade" in qualification_message(qualified=False, definitive=False)


def _tournament(tournament_number: int) -> TournamentWithCategory:
    return TournamentWithCategory(
        id=TournamentId(1),
        category_id=CategoryId(2),
        tournament_number=tournament_number,
        season="2024-2025",
        tournament_date=date(2025, 2, 15),
        location="Courbevoie",
        import_date=datetime_utc.now(),
        category_name="Libre R1",
        game_type="LIBRE",
        level="R1",
    )


def _result(licence: str, name: str, position: int) -> TournamentResultWithPlayer:
    return TournamentResultWithPlayer(
        id=TournamentResultId(position),
        tournament_id=TournamentId(1),
        licence=licence,
        player_name=name,
        position=position,
        match_points=10 - position,
        points=100,
        reprises=80,
        email=f"{licence}@example.org",
    )


def _ranking(licence: str, rank_position: int, qualified: bool) -> RankingWithPlayer:
    return RankingWithPlayer(
        id=RankingId(rank_position),
        category_id=CategoryId(2),
        season="2024-2025",
        updated=datetime_utc.now(),
        licence=licence,
        total_match_points=20 - rank_position,
        total_points=0,
        total_reprises=0,
        avg_moyenne=1.25,
        best_serie=8,
        rank_position=rank_position,
        last_name="MARTIN",
        first_name="Jean",
        qualified=qualified,
    )


def test_build_results_email_personalises_tokens() -> None:
    participant = _result("0123456", "MARTIN Jean", 1)
    content = ResultsEmailContent(
        tournament=_tournament(3),
        results=[participant, _result("7654321", "DUPONT Paul", 2)],
        rankings=[_ranking("0123456", 1, qualified=True), _ranking("7654321", 2, qualified=True)],
        intro_text="Bonjour {first_name}, vous finissez {player_position}e ({ranking_position}e).",
        outro_text="",
    )

    email = build_results_email(content, participant, "0123456@example.org", _ENVELOPE)

    assert email.to == ["0123456@example.org"]
    assert email.subject == "Résultats - Libre R1 - 15/02/2025"
    assert "Bonjour Jean, vous finissez 1e (1e)." in email.html
    assert "Félicitations" in email.html


def test_build_results_email_after_finale_keeps_provisional_wording() -> None:
    participant = _result("0123456", "MARTIN Jean", 1)
    content = ResultsEmailContent(
        tournament=_tournament(4),
        results=[participant],
        rankings=[_ranking("0123456", 1, qualified=True)],
        intro_text="",
        outro_text="",
    )

    email = build_results_email(content, participant, "0123456@example.org", _ENVELOPE)

    assert "Félicitations" not in email.html
    assert "à ce stade de la compétition éligible pour la finale" in email.html
