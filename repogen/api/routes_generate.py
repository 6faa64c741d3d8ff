import logging
from typing import Any
from fastapi import APIRouter, Body, HTTPException
from repogen.core.config import settings
from repogen.core.errors import EntityGenError
from repogen.generators.entity_gen.generator import build_descriptors, render_descriptors
from repogen.generators.entity_gen.render import module_name
from repogen.generators.entity_gen.render_entity import build_key_query, key_method_name
from repogen.schemas.declaration import parse_document
from repogen.schemas.generate import (
    EntityOut,
    GenerateErrorDetail,
    GeneratedFileOut,
    GenerateResponse,
    KeyOut,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/generate")

@router.post("", response_model=GenerateResponse)
def generate(data: Any = Body(...)):
    try:
        document = parse_document(data)
        descriptors = build_descriptors(document.records)
        files = render_descriptors(descriptors, package_dir=settings.package_dir)
    except EntityGenError as e:
        log.warning("Generation rejected: %s", e, extra={"entity": e.entity or "-", "stage": "-"})
        detail = GenerateErrorDetail(error=type(e).__name__, message=str(e), entity=e.entity, field=e.field)
        raise HTTPException(status_code=422, detail=detail.model_dump())

    entities = []
    for descriptor in descriptors:
        keys = []
        for key in descriptor.keys:
            query = build_key_query(descriptor, key)
            keys.append(KeyOut(
                name=key.name,
                unique=key.unique,
                method=key_method_name(descriptor, key),
                sql=query.sql,
                params=list(query.params),
            ))
        entities.append(EntityOut(
            entity=descriptor.entity,
            table_name=descriptor.table_name,
            module=module_name(descriptor),
            keys=keys,
        ))

    return GenerateResponse(
        entities=entities,
        files=[GeneratedFileOut(path=f.path, content=f.content) for f in files],
    )
