"""Entity-specific rendering functions for repository generation.

Everything here is a pure function of an ``EntityDescriptor``: no clock, no
environment, no I/O. Rendering the same descriptor twice gives the same text.
"""
import json
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from repogen.generators.entity_gen.types import (
    EntityArtifacts,
    EntityDescriptor,
    Key,
    KeyQuery,
    KeyShape,
)
from repogen.generators.entity_gen.utils import split_model_path, to_constant_case


TEXT_TYPES = {"text", "string", "str", "varchar", "char", "bpchar", "citext"}

# tag -> (annotation, (module, name) to import or None)
TYPE_MAP: Dict[str, Tuple[str, Optional[Tuple[str, str]]]] = {
    "uuid": ("UUID", ("uuid", "UUID")),
    "int": ("int", None),
    "integer": ("int", None),
    "i16": ("int", None),
    "i32": ("int", None),
    "i64": ("int", None),
    "u32": ("int", None),
    "u64": ("int", None),
    "smallint": ("int", None),
    "bigint": ("int", None),
    "int2": ("int", None),
    "int4": ("int", None),
    "int8": ("int", None),
    "serial": ("int", None),
    "bigserial": ("int", None),
    "float": ("float", None),
    "f32": ("float", None),
    "f64": ("float", None),
    "double": ("float", None),
    "real": ("float", None),
    "float4": ("float", None),
    "float8": ("float", None),
    "bool": ("bool", None),
    "boolean": ("bool", None),
    "decimal": ("Decimal", ("decimal", "Decimal")),
    "numeric": ("Decimal", ("decimal", "Decimal")),
    "datetime": ("datetime", ("datetime", "datetime")),
    "timestamp": ("datetime", ("datetime", "datetime")),
    "timestamptz": ("datetime", ("datetime", "datetime")),
    "date": ("date", ("datetime", "date")),
    "time": ("time", ("datetime", "time")),
    "bytes": ("bytes", None),
    "bytea": ("bytes", None),
    "json": ("Any", ("typing", "Any")),
    "jsonb": ("Any", ("typing", "Any")),
}


def is_text_type(field_type: str) -> bool:
    """Owned string flavours ("Text", "varchar", "String", "EmailString", ...)."""
    tag = field_type.strip().lower()
    return tag in TEXT_TYPES or tag.endswith("string")


def map_field_type(field_type: str) -> Tuple[str, Optional[Tuple[str, str]]]:
    """Map a semantic type tag to a Python annotation and its import (if any)."""
    tag = field_type.strip().lower()
    if tag in TEXT_TYPES:
        return "str", None
    if tag in TYPE_MAP:
        return TYPE_MAP[tag]
    # Unknown tags are used verbatim; the declaration's imports must provide them
    return field_type.strip(), None


def map_param_type(field_type: str) -> Tuple[str, Optional[Tuple[str, str]]]:
    """Parameter annotation: any textual type is taken as a plain ``str``."""
    if is_text_type(field_type):
        return "str", None
    return map_field_type(field_type)


def record_type_name(descriptor: EntityDescriptor) -> str:
    if descriptor.model_path:
        return split_model_path(descriptor.model_path)[1]
    return descriptor.entity


def interface_name(descriptor: EntityDescriptor) -> str:
    return f"{descriptor.entity}Repo"


def pool_repo_name(descriptor: EntityDescriptor) -> str:
    return f"{descriptor.entity}PoolRepo"


def transaction_repo_name(descriptor: EntityDescriptor) -> str:
    return f"{descriptor.entity}TransactionRepo"


def row_mapper_name(descriptor: EntityDescriptor) -> str:
    return f"{descriptor.snake_name}_from_row"


def key_method_name(descriptor: EntityDescriptor, key: Key) -> str:
    if key.shape is KeyShape.SINGULAR:
        return f"find_{descriptor.snake_name}_by_{key.name}"
    return f"list_{descriptor.snake_name}_by_{key.name}"


def query_constant_name(descriptor: EntityDescriptor, key: Key) -> str:
    return f"{to_constant_case(key_method_name(descriptor, key))}_SQL"


def build_key_query(descriptor: EntityDescriptor, key: Key) -> KeyQuery:
    """
    Build the lookup query for a key.

    ``select * from <table> where <col_1> = $1 and ... and <col_n> = $n`` with
    placeholders numbered in component order; ``params`` lists the field names
    to bind, in the same order.
    """
    where_clause = " and ".join(
        f"{c.column_name} = ${i}" for i, c in enumerate(key.components, start=1)
    )
    sql = f"select * from {descriptor.table_name} where {where_clause}"
    params = tuple(c.field_name for c in key.components)
    return KeyQuery(sql=sql, params=params)


def _py_str(value: str) -> str:
    """Render a double-quoted Python string literal."""
    return json.dumps(value)


def _signature(descriptor: EntityDescriptor, key: Key) -> str:
    record = record_type_name(descriptor)
    args = ", ".join(
        f"{c.field_name}: {map_param_type(c.field_type)[0]}" for c in key.components
    )
    if key.shape is KeyShape.SINGULAR:
        rtn = f"Optional[{record}]"
    else:
        rtn = f"List[{record}]"
    return f"async def {key_method_name(descriptor, key)}(self, {args}) -> {rtn}:"


@dataclass(frozen=True)
class FetchStyle:
    """How an implementation reaches storage: the handle and whether to take the guard."""
    handle: str
    guarded: bool


POOL_FETCH = FetchStyle(handle="self._pool", guarded=False)
TRANSACTION_FETCH = FetchStyle(handle="self._conn", guarded=True)


def _render_key_method(descriptor: EntityDescriptor, key: Key, fetch: FetchStyle) -> List[str]:
    query = build_key_query(descriptor, key)
    args = ", ".join((query_constant_name(descriptor, key),) + query.params)
    mapper = row_mapper_name(descriptor)

    if key.shape is KeyShape.SINGULAR:
        call = f"row = await {fetch.handle}.fetchrow({args})"
        result = f"return {mapper}(row) if row is not None else None"
    else:
        call = f"rows = await {fetch.handle}.fetch({args})"
        result = f"return [{mapper}(row) for row in rows]"

    lines = [f"    {_signature(descriptor, key)}"]
    if fetch.guarded:
        lines.append("        async with self._lock:")
        lines.append(f"            {call}")
    else:
        lines.append(f"        {call}")
    lines.append(f"        {result}")
    return lines


def render_interface(descriptor: EntityDescriptor) -> str:
    """Generate the abstract lookup interface (one abstract method per key)."""
    lines = [
        f"class {interface_name(descriptor)}(ABC):",
        f'    """Lookup operations for {record_type_name(descriptor)} records."""',
    ]
    for key in descriptor.keys:
        lines.append("")
        lines.append("    @abstractmethod")
        lines.append(f"    {_signature(descriptor, key)}")
        lines.append("        ...")
    return "\n".join(lines) + "\n"


def render_direct_store(descriptor: EntityDescriptor) -> str:
    """Generate the implementation over a shared asyncpg pool."""
    lines = [
        f"class {pool_repo_name(descriptor)}({interface_name(descriptor)}):",
        f'    """{interface_name(descriptor)} over a shared asyncpg pool."""',
        "",
        "    def __init__(self, pool: asyncpg.Pool):",
        "        self._pool = pool",
    ]
    for key in descriptor.keys:
        lines.append("")
        lines.extend(_render_key_method(descriptor, key, POOL_FETCH))
    return "\n".join(lines) + "\n"


def render_transactional(descriptor: EntityDescriptor) -> str:
    """Generate the implementation over a connection holding an open transaction."""
    lines = [
        f"class {transaction_repo_name(descriptor)}({interface_name(descriptor)}):",
        f'    """{interface_name(descriptor)} over a connection holding an open transaction.',
        "",
        "    Each query holds the lock for its duration, so concurrent calls on the",
        "    same transaction run one at a time. Pass the same lock to every",
        "    repository sharing the connection. Commit and rollback belong to the",
        "    caller.",
        '    """',
        "",
        "    def __init__(self, conn: asyncpg.Connection, lock: Optional[asyncio.Lock] = None):",
        "        self._conn = conn",
        "        self._lock = lock if lock is not None else asyncio.Lock()",
    ]
    for key in descriptor.keys:
        lines.append("")
        lines.extend(_render_key_method(descriptor, key, TRANSACTION_FETCH))
    return "\n".join(lines) + "\n"


def render_entity_artifacts(descriptor: EntityDescriptor) -> EntityArtifacts:
    return EntityArtifacts(
        interface=render_interface(descriptor),
        direct_store=render_direct_store(descriptor),
        transactional=render_transactional(descriptor),
    )


def render_record_model(descriptor: EntityDescriptor) -> str:
    """Generate a Pydantic model for the record when no existing class is named."""
    lines = [f"class {descriptor.entity}(BaseModel):"]
    if not descriptor.columns:
        lines.append("    pass")
    for column in descriptor.columns:
        lines.append(f"    {column.field_name}: {map_field_type(column.field_type)[0]}")
    return "\n".join(lines) + "\n"


def render_row_mapper(descriptor: EntityDescriptor) -> str:
    """Generate the row -> record function (column name to field name)."""
    record = record_type_name(descriptor)
    lines = [f"def {row_mapper_name(descriptor)}(row: Mapping[str, Any]) -> {record}:"]
    if not descriptor.columns:
        lines.append(f"    return {record}()")
        return "\n".join(lines) + "\n"
    lines.append(f"    return {record}(")
    for column in descriptor.columns:
        lines.append(f"        {column.field_name}=row[{_py_str(column.column_name)}],")
    lines.append("    )")
    return "\n".join(lines) + "\n"


def render_queries(descriptor: EntityDescriptor) -> str:
    lines = [
        f"{query_constant_name(descriptor, key)} = {_py_str(build_key_query(descriptor, key).sql)}"
        for key in descriptor.keys
    ]
    return "\n".join(lines) + "\n" if lines else ""


def _collect_imports(descriptor: EntityDescriptor) -> Dict[str, Set[str]]:
    imports: Dict[str, Set[str]] = {
        "abc": {"ABC", "abstractmethod"},
        "typing": {"TYPE_CHECKING", "Any", "Mapping", "Optional"},
    }
    if any(key.shape is KeyShape.PLURAL for key in descriptor.keys):
        imports["typing"].add("List")

    needed = []
    if descriptor.model_path is None:
        needed.extend(map_field_type(c.field_type)[1] for c in descriptor.columns)
    for key in descriptor.keys:
        needed.extend(map_param_type(c.field_type)[1] for c in key.components)
    for item in needed:
        if item is not None:
            module, name = item
            imports.setdefault(module, set()).add(name)
    return imports


def _sort_names(names: Set[str]) -> List[str]:
    # Constants first, then classes and functions, like isort
    constants = sorted(n for n in names if n.isupper())
    others = sorted((n for n in names if not n.isupper()), key=str.lower)
    return constants + others


def render_imports(descriptor: EntityDescriptor) -> str:
    stdlib = ["from __future__ import annotations", "", "import asyncio"]
    for module, names in sorted(_collect_imports(descriptor).items()):
        stdlib.append(f"from {module} import {', '.join(_sort_names(names))}")

    blocks = ["\n".join(stdlib)]
    if descriptor.model_path is None:
        blocks.append("from pydantic import BaseModel")

    local = []
    if descriptor.model_path is not None:
        module, name = split_model_path(descriptor.model_path)
        local.append(f"from {module} import {name}")
    local.extend(descriptor.imports)
    if local:
        blocks.append("\n".join(local))

    blocks.append("if TYPE_CHECKING:\n    import asyncpg")
    return "\n\n".join(blocks) + "\n"


def render_entity_module(descriptor: EntityDescriptor) -> str:
    """
    Generate the full repository module for one entity.

    Layout: header, imports, record model (unless an existing class is
    imported), row mapper, query constants, interface, pool implementation,
    transaction implementation.
    """
    artifacts = render_entity_artifacts(descriptor)
    sections = [
        f"# Code generated by repogen from record {descriptor.entity}. DO NOT EDIT.\n"
        + render_imports(descriptor),
    ]
    if descriptor.model_path is None:
        sections.append(render_record_model(descriptor))
    sections.append(render_row_mapper(descriptor))
    queries = render_queries(descriptor)
    if queries:
        sections.append(queries)
    sections.append(artifacts.interface)
    sections.append(artifacts.direct_store)
    sections.append(artifacts.transactional)
    return "\n\n".join(sections)

