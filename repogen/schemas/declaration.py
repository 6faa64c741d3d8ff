"""Raw annotated record declarations.

These models describe the input exactly as written in a declaration document
(or produced by ``repogen.declare``), before any normalization. Shape and type
errors in annotation arguments are reported as ``AnnotationParseError``.
"""
import keyword
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError, field_validator

from repogen.core.errors import AnnotationParseError


def _require_identifier(value: Optional[str], what: str) -> Optional[str]:
    if value is not None and (not value.isidentifier() or keyword.iskeyword(value)):
        raise ValueError(f"{what} must be a valid Python identifier, got {value!r}")
    return value


class EntityArgs(BaseModel):
    """Record-level ``entity`` annotation."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[StrictStr] = None
    table_name: Optional[StrictStr] = None

    @field_validator("name")
    @classmethod
    def _name_is_identifier(cls, v):
        return _require_identifier(v, "entity name")

    @field_validator("table_name")
    @classmethod
    def _table_name_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("table_name must not be blank")
        return v


class KeyArgs(BaseModel):
    """Field-level ``key`` annotation."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[StrictStr] = None
    unique: Optional[StrictBool] = None


class ColumnArgs(BaseModel):
    """Field-level ``column`` annotation."""
    model_config = ConfigDict(extra="forbid")

    name: StrictStr

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("column name must not be blank")
        return v


class FieldDeclaration(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Positional fields have no name; the extractor rejects them
    name: Optional[StrictStr] = None
    type: StrictStr
    key: Optional[KeyArgs] = None
    column: Optional[ColumnArgs] = None

    @field_validator("name", mode="before")
    @classmethod
    def _blank_name_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("key", mode="before")
    @classmethod
    def _key_shorthand(cls, v):
        # key: true | key: "name" | key: {name, unique}
        if v is True:
            return {}
        if v is False:
            return None
        if isinstance(v, str):
            return {"name": v}
        return v

    @field_validator("column", mode="before")
    @classmethod
    def _column_shorthand(cls, v):
        if isinstance(v, str):
            return {"name": v}
        return v


class RecordDeclaration(BaseModel):
    model_config = ConfigDict(extra="forbid")

    record: StrictStr
    kind: Literal["struct", "enum", "union", "tuple"] = "struct"
    entity: EntityArgs = Field(default_factory=EntityArgs)
    # Existing record class as "package.module:Name"; a model is emitted otherwise
    model: Optional[StrictStr] = None
    imports: List[StrictStr] = Field(default_factory=list)
    fields: List[FieldDeclaration] = Field(default_factory=list)

    @field_validator("record")
    @classmethod
    def _record_is_identifier(cls, v):
        return _require_identifier(v, "record identifier")

    @field_validator("model")
    @classmethod
    def _model_path_shape(cls, v):
        if v is None:
            return v
        module, sep, name = v.partition(":")
        if not sep or not module or not name.isidentifier():
            raise ValueError(f"model must look like 'package.module:Name', got {v!r}")
        return v


class DeclarationDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    records: List[RecordDeclaration]


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", ""))
    return "; ".join(parts)


def parse_record(data: Dict[str, Any]) -> RecordDeclaration:
    """Validate one raw record declaration."""
    try:
        return RecordDeclaration.model_validate(data)
    except ValidationError as e:
        entity = data.get("record") if isinstance(data, dict) else None
        raise AnnotationParseError(
            f"invalid annotations: {_describe(e)}",
            entity=entity if isinstance(entity, str) else None,
        ) from e


def parse_document(data: Any) -> DeclarationDocument:
    """Validate a full declaration document (``{"records": [...]}``)."""
    if isinstance(data, list):
        data = {"records": data}
    try:
        return DeclarationDocument.model_validate(data)
    except ValidationError as e:
        raise AnnotationParseError(f"invalid declaration document: {_describe(e)}") from e
