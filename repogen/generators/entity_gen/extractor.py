"""Schema extraction: raw record declaration -> field columns and key tags."""
import keyword
import logging
from typing import Dict, List

from repogen.core.errors import (
    AnnotationParseError,
    DuplicateField,
    FieldRequired,
    MissingKeyName,
    StructRequired,
)
from repogen.core.workflow import GenerationStage
from repogen.generators.entity_gen.types import ExtractedSchema, FieldColumn, KeyTag
from repogen.schemas.declaration import RecordDeclaration

log = logging.getLogger(__name__)


# Field names become parameters of generated methods
RESERVED_NAMES = {"self"}


def _is_identifier(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name) and name not in RESERVED_NAMES


def extract_schema(record: RecordDeclaration) -> ExtractedSchema:
    """
    Normalize a record declaration.

    Column names fall back to the field identifier, key names fall back to the
    field identifier. Fields are visited in declaration order and the first
    problem found aborts extraction.

    Raises:
        StructRequired: record is an enum/union/tuple shape
        MissingKeyName: key-tagged field with no key name and no field name
        FieldRequired: any other field without a name
        DuplicateField: field name declared twice
        AnnotationParseError: field or key name unusable as a Python identifier
    """
    entity = record.record
    if record.kind != "struct":
        raise StructRequired(entity=entity, kind=record.kind)

    columns: Dict[str, FieldColumn] = {}
    key_tags: List[KeyTag] = []

    for position, field in enumerate(record.fields):
        if field.name is None:
            if field.key is not None and field.key.name is None:
                raise MissingKeyName(entity=entity, position=position)
            raise FieldRequired(entity=entity, position=position)

        if not _is_identifier(field.name):
            raise AnnotationParseError(
                f"field name {field.name!r} is not a valid Python identifier",
                entity=entity,
                field=field.name,
            )
        if field.name in columns:
            raise DuplicateField(entity=entity, field=field.name)

        column_name = field.column.name if field.column is not None else field.name
        column = FieldColumn(
            field_name=field.name,
            field_type=field.type,
            column_name=column_name,
        )
        columns[field.name] = column

        if field.key is None:
            continue

        key_name = field.key.name if field.key.name is not None else field.name
        if not _is_identifier(key_name):
            raise AnnotationParseError(
                f"key name {key_name!r} on field '{field.name}' is not a valid Python identifier",
                entity=entity,
                field=field.name,
            )
        key_tags.append(KeyTag(key_name=key_name, column=column, unique=field.key.unique))

    log.debug(
        "Extracted %d fields, %d key tags", len(columns), len(key_tags),
        extra={"entity": entity, "stage": str(GenerationStage.EXTRACT)},
    )
    return ExtractedSchema(entity=entity, columns=columns, key_tags=key_tags)
