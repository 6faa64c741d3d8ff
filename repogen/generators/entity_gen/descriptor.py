"""Entity descriptor assembly."""
import logging

from repogen.core.errors import AnnotationParseError, DuplicateField, OrphanKeyComponent
from repogen.core.workflow import GenerationStage
from repogen.generators.entity_gen.extractor import extract_schema
from repogen.generators.entity_gen.grouping import group_keys
from repogen.generators.entity_gen.render_entity import query_constant_name
from repogen.generators.entity_gen.types import EntityDescriptor
from repogen.schemas.declaration import RecordDeclaration

log = logging.getLogger(__name__)


def assemble_descriptor(record: RecordDeclaration) -> EntityDescriptor:
    """Run extraction and key grouping for one record and check the result."""
    schema = extract_schema(record)
    keys = group_keys(schema.key_tags, entity=schema.entity)

    columns = tuple(schema.columns.values())
    descriptor = EntityDescriptor(
        entity=record.record,
        display_name=record.entity.name,
        table_name=record.entity.table_name or record.record,
        columns=columns,
        keys=keys,
        model_path=record.model,
        imports=tuple(dict.fromkeys(record.imports)),
    )
    validate_descriptor(descriptor)

    log.info(
        "Assembled descriptor: table=%s fields=%d keys=%d",
        descriptor.table_name, len(descriptor.columns), len(descriptor.keys),
        extra={"entity": descriptor.entity, "stage": str(GenerationStage.ASSEMBLE)},
    )
    return descriptor


def validate_descriptor(descriptor: EntityDescriptor) -> None:
    """Check field uniqueness, key components and query constant names."""
    seen = set()
    for column in descriptor.columns:
        if column.field_name in seen:
            raise DuplicateField(entity=descriptor.entity, field=column.field_name)
        seen.add(column.field_name)

    for key in descriptor.keys:
        for component in key.components:
            if component not in descriptor.columns:
                raise OrphanKeyComponent(
                    entity=descriptor.entity, key=key.name, field=component.field_name
                )

    # Constant names fold case, so distinct key names can still clash
    constants = {}
    for key in descriptor.keys:
        constant = query_constant_name(descriptor, key)
        if constant in constants:
            raise AnnotationParseError(
                f"keys '{constants[constant]}' and '{key.name}' both generate query constant {constant}",
                entity=descriptor.entity,
            )
        constants[constant] = key.name
