"""Base des schemas API / API schema base.

Les champs JSON sont en camelCase (vehicleId, kmInitial...), les noms
Python restent en snake_case.
JSON fields are camelCase (vehicleId, kmInitial...), Python names stay
snake_case.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
