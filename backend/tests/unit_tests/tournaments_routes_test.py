from typing import Any

import pytest
from heliclockter import datetime_utc
from starlette.exceptions import HTTPException

from billiards.models.db.account import UserAccountType
from billiards.models.db.tournament import Tournament
from billiards.models.db.user import UserPublic
from billiards.models.tournament_import import RecalculateRankingsBody, RecalculationError
from billiards.routes import tournaments as tournament_routes
from billiards.utils.id_types import CategoryId, TournamentId, UserId


class _DummyTransaction:
    async def __aenter__(self) -> "_DummyTransaction":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        return False


def _build_user(account_type: UserAccountType = UserAccountType.ADMIN) -> UserPublic:
    return UserPublic(
        id=UserId(7),
        username="admin",
        email="admin@example.com",
        created=datetime_utc.now(),
        account_type=account_type,
    )


@pytest.mark.asyncio
async def test_validate_requires_admin() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await tournament_routes.validate_tournament_file(None, _build_user(UserAccountType.VIEWER))

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_validate_without_file_is_bad_request() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await tournament_routes.validate_tournament_file(None, _build_user())

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "No file uploaded"


@pytest.mark.asyncio
async def test_import_rejects_out_of_range_tournament_number() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await tournament_routes.import_tournament(
            object(),  # type: ignore[arg-type]
            CategoryId(1),
            5,
            "2024-2025",
            None,
            _build_user(),
        )

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_import_rejects_malformed_season() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await tournament_routes.import_tournament(
            object(),  # type: ignore[arg-type]
            CategoryId(1),
            1,
            "2024",
            None,
            _build_user(),
        )

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_create_players_requires_players() -> None:
    body = tournament_routes.CreatePlayersBody(players=[])

    with pytest.raises(HTTPException) as exc_info:
        await tournament_routes.create_players(body, _build_user())

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_delete_missing_tournament_is_not_found(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_get_tournament(_: TournamentId) -> Tournament | None:
        return None

    monkeypatch.setattr(tournament_routes, "sql_get_tournament", fake_get_tournament)

    with pytest.raises(HTTPException) as exc_info:
        await tournament_routes.delete_tournament(TournamentId(404), _build_user())

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_delete_tournament_recalculates_rankings(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: dict[str, Any] = {"deleted": [], "recalculated": []}
    tournament = Tournament(
        id=TournamentId(9),
        category_id=CategoryId(2),
        tournament_number=2,
        season="2024-2025",
        tournament_date=None,
        import_date=datetime_utc.now(),
        location=None,
        results_email_sent=False,
        results_email_sent_at=None,
    )

    async def fake_get_tournament(_: TournamentId) -> Tournament:
        return tournament

    async def fake_delete(tournament_id: TournamentId) -> None:
        calls["deleted"].append(tournament_id)

    async def fake_recalculate(category_id: CategoryId, season: str) -> int:
        calls["recalculated"].append((category_id, season))
        return 0

    monkeypatch.setattr(tournament_routes, "sql_get_tournament", fake_get_tournament)
    monkeypatch.setattr(tournament_routes, "sql_delete_tournament", fake_delete)
    monkeypatch.setattr(tournament_routes, "recalculate_rankings", fake_recalculate)
    monkeypatch.setattr(tournament_routes.database, "transaction", lambda: _DummyTransaction())

    response = await tournament_routes.delete_tournament(TournamentId(9), _build_user())

    assert response.success is True
    assert calls["deleted"] == [TournamentId(9)]
    assert calls["recalculated"] == [(CategoryId(2), "2024-2025")]


@pytest.mark.asyncio
async def test_post_recalculate_rankings(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_recalculate(_: CategoryId, __: str) -> int:
        return 14

    monkeypatch.setattr(tournament_routes, "recalculate_rankings", fake_recalculate)

    response = await tournament_routes.post_recalculate_rankings(
        RecalculateRankingsBody(category_id=CategoryId(1), season="2024-2025"), _build_user()
    )

    assert response.ranked_players == 14
    assert response.message == "Rankings recalculated for 14 players"


@pytest.mark.asyncio
async def test_post_recalculate_all_rankings_reports_errors(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_recalculate_all() -> tuple[int, list[RecalculationError]]:
        return 2, [RecalculationError(category_id=CategoryId(3), season="2023-2024", error="boom")]

    monkeypatch.setattr(tournament_routes, "recalculate_all_rankings", fake_recalculate_all)

    response = await tournament_routes.post_recalculate_all_rankings(_build_user())

    assert response.recalculated == 2
    assert response.errors is not None
    assert response.errors[0].season == "2023-2024"
