"""Dataclasses for entity repository generation."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from repogen.generators.entity_gen.utils import to_snake_case


@dataclass(frozen=True)
class FieldColumn:
    """One declared field and the storage column it maps to."""
    field_name: str
    field_type: str  # Semantic type tag as declared (e.g. "UUID", "Text", "i32")
    column_name: str


@dataclass(frozen=True)
class KeyTag:
    """Raw key annotation on a single field, before grouping."""
    key_name: str
    column: FieldColumn
    unique: Optional[bool]  # None when the annotation does not say


class KeyShape(Enum):
    SINGULAR = "singular"  # find_<entity>_by_<key> -> Optional[Entity]
    PLURAL = "plural"  # list_<entity>_by_<key> -> List[Entity]


@dataclass(frozen=True)
class Key:
    """Named, possibly composite, lookup key."""
    name: str
    unique: bool
    components: Tuple[FieldColumn, ...]

    @property
    def shape(self) -> KeyShape:
        return KeyShape.SINGULAR if self.unique else KeyShape.PLURAL


@dataclass
class ExtractedSchema:
    """Extractor output: field columns by identifier plus key tags in declaration order."""
    entity: str
    columns: Dict[str, FieldColumn]
    key_tags: List[KeyTag]


@dataclass(frozen=True)
class EntityDescriptor:
    entity: str
    display_name: Optional[str]
    table_name: str
    columns: Tuple[FieldColumn, ...]
    keys: Tuple[Key, ...]
    model_path: Optional[str] = None
    imports: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def snake_name(self) -> str:
        return to_snake_case(self.display_name or self.entity)


@dataclass(frozen=True)
class KeyQuery:
    """Query text and ordered bind parameters for one key."""
    sql: str
    params: Tuple[str, ...]


@dataclass(frozen=True)
class EntityArtifacts:
    """The three generated artifacts for one entity."""
    interface: str
    direct_store: str
    transactional: str


@dataclass
class GeneratedFile:
    """Represents a generated file."""
    path: str  # Relative path from output directory
    content: str  # File contents
