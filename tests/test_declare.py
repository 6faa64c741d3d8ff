"""Tests for class based entity declarations."""
import enum
from typing import Annotated, Callable, List, NamedTuple, Optional, Union
from uuid import UUID

import pytest

from repogen.core.errors import AnnotationParseError, StructRequired
from repogen.declare import Column, Key, declaration_from_class, document_from_classes, entity
from repogen.generators.entity_gen import render_files
from repogen.generators.entity_gen.descriptor import assemble_descriptor
from repogen.generators.entity_gen.extractor import extract_schema


@entity(name="my_entity", table_name="my_entity")
class MyEntity:
    entity_id: Annotated[UUID, Key("id", unique=True), Column("id")]
    name: Annotated[str, Key("name_version", unique=True)]
    version: Annotated[int, Key("name_version", unique=True)]
    color: Annotated[str, Key("color")]
    description: str


class Widget:
    sku: Annotated[str, Key(unique=True)]


class Color(enum.Enum):
    RED = 1


class Point(NamedTuple):
    x: int
    y: int


def test_declaration_from_annotated_class():
    record = declaration_from_class(MyEntity)

    assert record.record == "MyEntity"
    assert record.entity.name == "my_entity"
    assert record.entity.table_name == "my_entity"
    assert [f.name for f in record.fields] == ["entity_id", "name", "version", "color", "description"]
    assert record.fields[0].type == "UUID"
    assert record.fields[0].column.name == "id"
    assert record.fields[0].key.unique is True
    assert record.fields[4].key is None


def test_class_declaration_descriptor():
    descriptor = assemble_descriptor(declaration_from_class(MyEntity))

    assert [k.name for k in descriptor.keys] == ["id", "name_version", "color"]
    assert [k.unique for k in descriptor.keys] == [True, True, False]
    assert descriptor.keys[0].components[0].column_name == "id"


def test_undecorated_class_uses_defaults():
    descriptor = assemble_descriptor(declaration_from_class(Widget))

    assert descriptor.table_name == "Widget"
    assert descriptor.keys[0].name == "sku"
    assert descriptor.keys[0].unique is True


def test_enum_and_tuple_classes_are_rejected():
    with pytest.raises(StructRequired):
        extract_schema(declaration_from_class(Color))
    with pytest.raises(StructRequired):
        extract_schema(declaration_from_class(Point))


def test_bad_marker_arguments():
    class Bad:
        code: Annotated[str, Key(unique="yes")]

    with pytest.raises(AnnotationParseError):
        declaration_from_class(Bad)


def test_document_from_classes_renders():
    files = render_files(document_from_classes(MyEntity, Widget))

    assert [f.path for f in files] == ["repos/__init__.py", "repos/my_entity.py", "repos/widget.py"]
    assert "async def find_widget_by_sku(self, sku: str) -> Optional[Widget]:" in files[2].content
    assert "async def find_my_entity_by_id(self, entity_id: UUID) -> Optional[MyEntity]:" in files[1].content


class Pet:
    owner: Annotated[Optional[UUID], Key(unique=True)]
    nickname: Annotated[str | None, Key("nickname")]
    tags: List[str]
    scores: dict[str, float]


def test_optional_hints_declare_the_inner_type():
    record = declaration_from_class(Pet)

    assert [f.type for f in record.fields] == ["UUID", "str", "list[str]", "dict[str, float]"]

    module = render_files(document_from_classes(Pet))[1].content
    assert "async def find_pet_by_owner(self, owner: UUID) -> Optional[Pet]:" in module
    assert "async def list_pet_by_nickname(self, nickname: str) -> List[Pet]:" in module
    assert "    tags: list[str]" in module


def test_unsupported_generic_hints_are_rejected():
    class Mixed:
        value: Union[int, str]

    class Handler:
        callback: Callable[[int], int]

    with pytest.raises(AnnotationParseError, match="unsupported type hint") as exc:
        declaration_from_class(Mixed)
    assert exc.value.entity == "Mixed"
    assert exc.value.field == "value"

    with pytest.raises(AnnotationParseError):
        declaration_from_class(Handler)
