"""Base model for Qapac API payloads.

The backend speaks snake_case JSON, so field names map one to one.
:class:`QapacBaseModel` only adds:

* frozen instances (entities are value snapshots, never mutated locally);
* ``extra="ignore"`` so new backend fields do not break parsing;
* dropping explicit ``null`` values so the field default is used.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class QapacBaseModel(BaseModel):
    """Base for Qapac API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {key: value for key, value in values.items() if value is not None}
