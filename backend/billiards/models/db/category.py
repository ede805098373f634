from billiards.models.db.shared import BaseModelORM
from billiards.utils.id_types import CategoryId


class Category(BaseModelORM):
    id: CategoryId
    game_type: str
    level: str
    display_name: str
