"""Shared Schema Base — camelCase on the wire, snake_case in Python.

Design Decisions:
    - alias_generator=to_camel with populate_by_name: routes build models with
      Python names, FastAPI serializes by alias (paymentId, createdAt, ...)
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
