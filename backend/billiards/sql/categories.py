from billiards.database import database
from billiards.models.db.category import Category
from billiards.utils.id_types import CategoryId


async def sql_get_categories() -> list[Category]:
    query = """
        SELECT *
        FROM categories
        ORDER BY game_type, level
        """
    result = await database.fetch_all(query=query)
    return [Category.model_validate(dict(x._mapping)) for x in result]


async def sql_get_category(category_id: CategoryId) -> Category | None:
    query = """
        SELECT *
        FROM categories
        WHERE id = :category_id
        """
    result = await database.fetch_one(query=query, values={"category_id": category_id})
    return Category.model_validate(dict(result._mapping)) if result is not None else None


async def sql_create_category(game_type: str, level: str, display_name: str) -> CategoryId:
    query = """
        INSERT INTO categories (game_type, level, display_name)
        VALUES (:game_type, :level, :display_name)
        ON CONFLICT (game_type, level) DO UPDATE
        SET display_name = EXCLUDED.display_name
        RETURNING id
        """
    new_id = await database.fetch_val(
        query=query,
        values={"game_type": game_type, "level": level, "display_name": display_name},
    )
    return CategoryId(new_id)
