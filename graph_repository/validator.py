from collections.abc import Mapping

from pydantic import BaseModel

from graph_repository.field_schema import EntitySchema


def _from_attributes_enabled(schema: type[BaseModel]) -> bool:
    conf = getattr(schema, 'model_config', None)
    if conf is None:
        return False
    if isinstance(conf, Mapping):
        return bool(conf.get('from_attributes', False))
    return bool(getattr(conf, 'from_attributes', False))


def validate_schema_base(schema: type[BaseModel]) -> None:
    """The mapping schema must be a Pydantic model that can read ORM attributes."""
    if not isinstance(schema, type) or not issubclass(schema, BaseModel):
        raise TypeError('mapping_schema must be a subclass of pydantic.BaseModel.')
    if not _from_attributes_enabled(schema):
        raise TypeError('mapping_schema.model_config.from_attributes must be set to True.')


def validate_schema_fields(schema: type[BaseModel], entity: EntitySchema) -> None:
    """Every required schema field must be a column of the entity."""
    required = {name for name, f in schema.model_fields.items() if f.is_required()}
    missing = required - set(entity.fields)
    if missing:
        raise TypeError(
            f'Required schema fields must map to model columns: missing={sorted(missing)} (model={entity.name})'
        )
