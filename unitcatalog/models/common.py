"""Shared base model used across unit catalog domain models."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class UnitCatalogBase(BaseModel):
    """Base model with common configuration for all catalog Pydantic models.

    Wire documents use camelCase keys (``externalId``, ``aliasNames``);
    Python code uses snake_case attribute names.
    """

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "ignore",
        "protected_namespaces": (),
    }
