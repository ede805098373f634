from billiards.logic.ranking.qualification import get_qualified_count, is_qualified
from billiards.models.db.ranking import RankingWithPlayer
from billiards.sql.rankings import sql_get_rankings
from billiards.utils.app_settings import get_qualification_settings
from billiards.utils.id_types import CategoryId


async def get_rankings_with_qualification(
    category_id: CategoryId, season: str
) -> tuple[list[RankingWithPlayer], int]:
    """Stored rankings of a category and season, flagged with the finale qualification."""
    rankings = await sql_get_rankings(category_id, season)
    qualified_count = get_qualified_count(len(rankings), await get_qualification_settings())
    return [
        ranking.model_copy(
            update={"qualified": is_qualified(ranking.rank_position, qualified_count)}
        )
        for ranking in rankings
    ], qualified_count
