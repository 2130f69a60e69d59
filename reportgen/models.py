"""Typed report descriptor models using Pydantic.

Schema documents use PascalCase keys (``Name``, ``Fields``, ``ColName``...).
Keys are matched case-insensitively, unknown keys are ignored and missing or
``null`` values fall back to empty defaults.
"""

from __future__ import annotations

from operator import attrgetter
from typing import Any, Dict, Iterable, List, Tuple

import pydantic
from pydantic import BaseModel, ConfigDict, StrictStr, field_validator, model_validator


class _SchemaModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _match_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        folded = {
            (info.alias or name).lower(): (info.alias or name)
            for name, info in cls.model_fields.items()
        }
        matched: Dict[str, Any] = {}
        for key, value in data.items():
            target = folded.get(str(key).lower())
            # null leaves the zero value in place
            if target is None or value is None:
                continue
            matched[target] = value
        return matched


class Parameter(_SchemaModel):
    """A report parameter. Carried through, never used for generation."""

    name: StrictStr = pydantic.Field(default="", alias="Name")
    type: StrictStr = pydantic.Field(default="", alias="Type")
    db_type: StrictStr = pydantic.Field(default="", alias="DBType")


class Field(_SchemaModel):
    """An output column: its name and declared type."""

    col_name: StrictStr = pydantic.Field(default="", alias="ColName")
    type: StrictStr = pydantic.Field(default="", alias="Type")
    nullable: StrictStr = pydantic.Field(default="", alias="Nullable")


class ReportDescriptor(_SchemaModel):
    name: StrictStr = pydantic.Field(default="", alias="Name")
    sql_file: StrictStr = pydantic.Field(default="", alias="SqlFile")
    parameters: Tuple[Parameter, ...] = pydantic.Field(default=(), alias="Parameters")
    fields: Tuple[Field, ...] = pydantic.Field(default=(), alias="Fields")

    @field_validator("parameters", "fields", mode="before")
    @classmethod
    def _null_items_are_empty(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{} if item is None else item for item in value]
        return value


def sort_reports_by_name(reports: Iterable[ReportDescriptor]) -> List[ReportDescriptor]:
    """Return reports ordered by name. Stream order is kept for equal names."""
    return sorted(reports, key=attrgetter("name"))
