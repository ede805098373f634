from typing import Any

import pytest

from billiards.models.db.player import UNKNOWN_CLUB
from billiards.sql import players as players_sql


@pytest.mark.asyncio
async def test_create_missing_player_matches_licences_without_spaces(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    executed: list[tuple[str, dict[str, Any]]] = []

    async def fake_execute(query: str, values: dict[str, Any]) -> None:
        executed.append((query, values))

    monkeypatch.setattr(players_sql.database, "execute", fake_execute)

    await players_sql.sql_create_missing_player("012 3456", "Jean", "MARTIN")

    [(query, values)] = executed
    assert "NOT EXISTS" in query
    assert "REPLACE(licence, ' ', '') = :licence" in query
    assert values == {
        "licence": "0123456",
        "first_name": "Jean",
        "last_name": "MARTIN",
        "club": UNKNOWN_CLUB,
    }
