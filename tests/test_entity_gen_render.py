"""Tests for repository code synthesis."""
import ast

from repogen.generators.entity_gen.descriptor import assemble_descriptor
from repogen.generators.entity_gen.render import render_package_init
from repogen.generators.entity_gen.render_entity import (
    build_key_query,
    is_text_type,
    key_method_name,
    map_field_type,
    map_param_type,
    render_entity_artifacts,
    render_entity_module,
    render_interface,
)
from repogen.schemas.declaration import parse_record


def _descriptor(data):
    return assemble_descriptor(parse_record(data))


def _class_methods(source, class_name):
    tree = ast.parse(source)
    for node in tree.body:
        if isinstance(node, ast.ClassDef) and node.name == class_name:
            return [n for n in node.body if isinstance(n, ast.AsyncFunctionDef)]
    raise AssertionError(f"class {class_name} not found")


def test_my_entity_interface(my_entity):
    """One operation per key name, with find/list shapes and parameter types."""
    interface = render_interface(_descriptor(my_entity))

    assert "class MyEntityRepo(ABC):" in interface
    assert "async def find_my_entity_by_id(self, id: UUID) -> Optional[MyEntity]:" in interface
    assert (
        "async def find_my_entity_by_name_version(self, name: str, version: int) -> Optional[MyEntity]:"
        in interface
    )
    assert "async def list_my_entity_by_color(self, color: str) -> List[MyEntity]:" in interface
    assert interface.count("@abstractmethod") == 3
    assert "description" not in interface


def test_interface_is_declaration_only(my_entity):
    module = render_entity_module(_descriptor(my_entity))
    for method in _class_methods(module, "MyEntityRepo"):
        assert len(method.body) == 1
        assert isinstance(method.body[0], ast.Expr)


def test_operation_count_matches_distinct_key_names(my_entity):
    module = render_entity_module(_descriptor(my_entity))
    for class_name in ("MyEntityRepo", "MyEntityPoolRepo", "MyEntityTransactionRepo"):
        names = [m.name for m in _class_methods(module, class_name)]
        assert names == [
            "find_my_entity_by_id",
            "find_my_entity_by_name_version",
            "list_my_entity_by_color",
        ]


def test_composite_key_query(my_entity):
    descriptor = _descriptor(my_entity)
    name_version = descriptor.keys[1]
    query = build_key_query(descriptor, name_version)
    assert query.sql == "select * from my_entity where name = $1 and version = $2"
    assert query.params == ("name", "version")


def test_query_uses_column_names_and_declaration_order():
    descriptor = _descriptor({
        "record": "Reading",
        "fields": [
            {"name": "sensor", "type": "uuid", "column": "sensor_id", "key": "by_sensor_day"},
            {"name": "value", "type": "f64"},
            {"name": "day", "type": "date", "column": "reading_day", "key": "by_sensor_day"},
        ],
    })
    key = descriptor.keys[0]
    query = build_key_query(descriptor, key)
    assert query.sql == "select * from Reading where sensor_id = $1 and reading_day = $2"
    assert query.params == ("sensor", "day")
    assert key_method_name(descriptor, key) == "list_reading_by_by_sensor_day"


def test_widget_table_keeps_case():
    descriptor = _descriptor({
        "record": "Widget",
        "fields": [{"name": "sku", "type": "String", "key": {"unique": True}}],
    })
    query = build_key_query(descriptor, descriptor.keys[0])
    assert query.sql == "select * from Widget where sku = $1"


def test_pool_and_transaction_bodies(my_entity):
    artifacts = render_entity_artifacts(_descriptor(my_entity))

    assert "class MyEntityPoolRepo(MyEntityRepo):" in artifacts.direct_store
    assert "row = await self._pool.fetchrow(FIND_MY_ENTITY_BY_NAME_VERSION_SQL, name, version)" in artifacts.direct_store
    assert "rows = await self._pool.fetch(LIST_MY_ENTITY_BY_COLOR_SQL, color)" in artifacts.direct_store
    assert "self._lock" not in artifacts.direct_store

    assert "class MyEntityTransactionRepo(MyEntityRepo):" in artifacts.transactional
    assert artifacts.transactional.count("async with self._lock:") == 3
    assert "row = await self._conn.fetchrow(FIND_MY_ENTITY_BY_ID_SQL, id)" in artifacts.transactional
    assert "rows = await self._conn.fetch(LIST_MY_ENTITY_BY_COLOR_SQL, color)" in artifacts.transactional


def test_module_layout(my_entity):
    module = render_entity_module(_descriptor(my_entity))

    assert module.startswith("# Code generated by repogen from record MyEntity. DO NOT EDIT.\n")
    assert "from uuid import UUID" in module
    assert "from pydantic import BaseModel" in module
    assert "if TYPE_CHECKING:\n    import asyncpg" in module
    assert 'FIND_MY_ENTITY_BY_NAME_VERSION_SQL = "select * from my_entity where name = $1 and version = $2"' in module
    assert "class MyEntity(BaseModel):" in module
    assert '        version=row["version"],' in module
    # Generated code must at least be valid Python
    ast.parse(module)


def test_row_mapper_reads_column_names():
    module = render_entity_module(_descriptor({
        "record": "MyEntity",
        "entity": {"name": "my_entity"},
        "fields": [
            {"name": "entity_id", "type": "Uuid", "key": {"name": "id", "unique": True}, "column": "id"},
        ],
    }))
    assert '        entity_id=row["id"],' in module
    assert "async def find_my_entity_by_id(self, entity_id: UUID) -> Optional[MyEntity]:" in module
    assert 'FIND_MY_ENTITY_BY_ID_SQL = "select * from MyEntity where id = $1"' in module


def test_existing_model_is_imported_not_emitted():
    module = render_entity_module(_descriptor({
        "record": "Account",
        "model": "app.models:AccountRecord",
        "imports": ["from app.types import Email"],
        "fields": [
            {"name": "email", "type": "EmailString", "key": {"unique": True}},
            {"name": "address", "type": "Email"},
        ],
    }))
    assert "from app.models import AccountRecord" in module
    assert "from app.types import Email" in module
    assert "BaseModel" not in module
    assert "async def find_account_by_email(self, email: str) -> Optional[AccountRecord]:" in module
    assert "def account_from_row(row: Mapping[str, Any]) -> AccountRecord:" in module
    ast.parse(module)


def test_text_types_become_plain_str_parameters():
    assert is_text_type("String")
    assert is_text_type("varchar")
    assert is_text_type("EmailString")
    assert not is_text_type("UUID")
    assert map_param_type("EmailString") == ("str", None)
    assert map_field_type("EmailString") == ("EmailString", None)
    assert map_field_type("timestamptz") == ("datetime", ("datetime", "datetime"))
    assert map_field_type("NUMERIC") == ("Decimal", ("decimal", "Decimal"))


def test_list_import_only_with_plural_keys():
    module = render_entity_module(_descriptor({
        "record": "Token",
        "fields": [{"name": "value", "type": "text", "key": {"unique": True}}],
    }))
    assert "from typing import TYPE_CHECKING, Any, Mapping, Optional\n" in module


def test_entity_without_keys_still_renders():
    module = render_entity_module(_descriptor({
        "record": "Note",
        "fields": [{"name": "body", "type": "text"}],
    }))
    assert "class NoteRepo(ABC):" in module
    assert "_SQL =" not in module
    ast.parse(module)


def test_rendering_is_deterministic(my_entity):
    first = render_entity_module(_descriptor(my_entity))
    second = render_entity_module(_descriptor(my_entity))
    assert first == second


def test_package_init_exports(my_entity):
    init = render_package_init([_descriptor(my_entity)])
    assert "from .my_entity import MyEntity, MyEntityRepo, MyEntityPoolRepo, MyEntityTransactionRepo" in init
    assert '    "MyEntityTransactionRepo",' in init
