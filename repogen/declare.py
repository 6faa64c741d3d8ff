"""Declare entities as annotated Python classes.

    @entity(name="my_entity", table_name="my_entity")
    class MyEntity:
        entity_id: Annotated[UUID, Key("id", unique=True), Column("id")]
        name: Annotated[str, Key("name_version", unique=True)]
        version: Annotated[int, Key("name_version", unique=True)]
        color: Annotated[str, Key()]
        description: str

``declaration_from_class`` turns such a class into the same raw
``RecordDeclaration`` a JSON/YAML document produces. The class is never
instantiated.
"""
import enum
import types
from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Optional, Union, get_args, get_origin, get_type_hints

from repogen.core.errors import AnnotationParseError
from repogen.schemas.declaration import DeclarationDocument, RecordDeclaration, parse_record

ENTITY_ARGS_ATTR = "__entity_args__"


@dataclass(frozen=True)
class Key:
    """Field marker: the field is a component of the named key."""
    name: Optional[str] = None
    unique: Optional[bool] = None


@dataclass(frozen=True)
class Column:
    """Field marker: explicit storage column name."""
    name: str


def entity(name: Optional[str] = None, table_name: Optional[str] = None):
    """Class decorator carrying the record-level annotation."""
    def wrap(cls):
        args: Dict[str, Any] = {}
        if name is not None:
            args["name"] = name
        if table_name is not None:
            args["table_name"] = table_name
        setattr(cls, ENTITY_ARGS_ATTR, args)
        return cls
    return wrap


def _record_kind(cls: type) -> str:
    if issubclass(cls, enum.Enum):
        return "enum"
    if issubclass(cls, tuple):
        return "tuple"
    return "struct"


_BUILTIN_GENERICS = (list, dict, set, frozenset, tuple)


def _type_tag(tp: Any, entity: str, field_name: str) -> str:
    """Render a field's type hint as a declaration type tag.

    ``Optional[X]`` (or ``X | None``) declares X; builtin generics keep their
    arguments (``list[str]``). Any other generic has no tag.
    """
    origin = get_origin(tp)
    if origin is None:
        return getattr(tp, "__name__", None) or repr(tp)

    args = get_args(tp)
    if origin in (Union, types.UnionType):
        members = [a for a in args if a is not type(None)]
        if len(members) == 1:
            return _type_tag(members[0], entity, field_name)
    elif origin in _BUILTIN_GENERICS and args:
        inner = ", ".join("..." if a is Ellipsis else _type_tag(a, entity, field_name) for a in args)
        return f"{origin.__name__}[{inner}]"
    raise AnnotationParseError(
        f"unsupported type hint {tp!r} on field '{field_name}'", entity=entity, field=field_name
    )


def _field_declaration(entity: str, field_name: str, hint: Any) -> Dict[str, Any]:
    declared: Dict[str, Any] = {"name": field_name}
    base = hint
    markers: List[Any] = []
    if get_origin(hint) is Annotated:
        base, *markers = get_args(hint)
    declared["type"] = _type_tag(base, entity, field_name)

    for marker in markers:
        if isinstance(marker, Key):
            declared["key"] = {k: v for k, v in (("name", marker.name), ("unique", marker.unique)) if v is not None}
        elif isinstance(marker, Column):
            declared["column"] = {"name": marker.name}
    return declared


def declaration_from_class(cls: type) -> RecordDeclaration:
    """Build a raw record declaration from an annotated class."""
    data: Dict[str, Any] = {
        "record": cls.__name__,
        "kind": _record_kind(cls),
        "entity": dict(getattr(cls, ENTITY_ARGS_ATTR, {})),
        "fields": [],
    }
    if data["kind"] == "struct":
        hints = get_type_hints(cls, include_extras=True)
        data["fields"] = [_field_declaration(cls.__name__, n, h) for n, h in hints.items() if not n.startswith("__")]
    return parse_record(data)


def document_from_classes(*classes: type) -> DeclarationDocument:
    """Collect several annotated classes into one declaration document."""
    return DeclarationDocument(records=[declaration_from_class(cls) for cls in classes])
