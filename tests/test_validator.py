from __future__ import annotations

import pytest
from pydantic import BaseModel, ConfigDict

from graph_repository.field_schema import EntitySchema
from graph_repository.validator import validate_schema_base, validate_schema_fields

from .models import Article
from .schemas import ArticleSchema


class NoFromAttributesSchema(BaseModel):
    id: int


class NotBaseModel:
    model_config = ConfigDict(from_attributes=True)


class ExtraRequiredSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    author: str


class ExtraOptionalSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    author: str | None = None


def test_validate_schema_base_accepts_from_attributes_model() -> None:
    validate_schema_base(ArticleSchema)


def test_validate_schema_base_rejects_missing_from_attributes() -> None:
    """
    < validate_schema_base raises TypeError without from_attributes=True >
    1. Call validate_schema_base on a BaseModel without from_attributes.
    2. Assert TypeError mentions from_attributes.
    """
    # 1 / 2
    with pytest.raises(TypeError, match='from_attributes'):
        validate_schema_base(NoFromAttributesSchema)


def test_validate_schema_base_rejects_non_basemodel() -> None:
    with pytest.raises(TypeError, match='BaseModel'):
        validate_schema_base(NotBaseModel)  # type: ignore[arg-type]


def test_validate_schema_fields_requires_columns_for_required_fields() -> None:
    """
    < Required schema fields must be model columns; optional extras are allowed >
    1. Validate a schema with a required non-column field -> TypeError.
    2. Validate a schema with an optional non-column field -> no error.
    """
    entity = EntitySchema.from_model(Article)

    # 1
    with pytest.raises(TypeError, match="missing=\\['author'\\]"):
        validate_schema_fields(ExtraRequiredSchema, entity)

    # 2
    validate_schema_fields(ExtraOptionalSchema, entity)
