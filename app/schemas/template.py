"""Template request/response schemas."""

import json
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

VariableType = Literal["text", "number", "boolean", "date", "select"]


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VariableDefinition(CamelModel):
    name: str = Field(..., pattern=r"^[A-Za-z0-9_]+$", max_length=128)
    type: VariableType
    label: str
    required: bool = False
    default_value: str | bool | int | float | None = None
    options: list[str] | None = None

    @field_validator("default_value", mode="before")
    @classmethod
    def date_default_to_iso(cls, v: Any) -> Any:
        # YAML loads unquoted 2024-01-01 as a date
        if isinstance(v, date):
            return v.isoformat()[:10]
        return v

    @model_validator(mode="after")
    def check_options(self) -> "VariableDefinition":
        if self.type == "select" and not self.options:
            raise ValueError(f"select variable '{self.name}' needs at least one option")
        return self


def _parse_variable_list(v: Any) -> Any:
    if isinstance(v, str):
        return json.loads(v)
    return v


def _check_unique_names(v: list[VariableDefinition]) -> list[VariableDefinition]:
    seen: set[str] = set()
    for var in v:
        if var.name in seen:
            raise ValueError(f"duplicate variable name '{var.name}'")
        seen.add(var.name)
    return v


class TemplateSummary(CamelModel):
    """Catalogue entry: everything except the Typst source."""

    id: str
    title: str
    description: str | None = None
    price: int
    variables: list[VariableDefinition]
    is_published: bool
    created_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @field_validator("variables", mode="before")
    @classmethod
    def parse_variables(cls, v: Any) -> Any:
        return _parse_variable_list(v)


class TemplateDetail(TemplateSummary):
    typst_content: str
    current_version: int
    updated_at: datetime


class TemplateManifest(BaseModel):
    """YAML frontmatter at the top of a ``.typ`` file in the templates dir."""

    id: str = Field(..., max_length=128)
    title: str
    description: str | None = None
    price: int = Field(0, ge=0)
    published: bool = False
    variables: list[VariableDefinition] = []

    @field_validator("variables")
    @classmethod
    def unique_names(cls, v: list[VariableDefinition]) -> list[VariableDefinition]:
        return _check_unique_names(v)


class CompileRequest(BaseModel):
    """Fill a template's variables and compile it to PDF."""
    variables: dict[str, Any] = {}


class CompileResponse(CamelModel):
    pdf_data_url: str
    file_name: str
