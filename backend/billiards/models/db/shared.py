from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseModelORM(BaseModel):
    # Field names stay snake_case in Python and SQL; the JSON API speaks camelCase.
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )
