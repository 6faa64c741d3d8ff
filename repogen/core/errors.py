"""Generation-time errors for entity repository synthesis.

Every error aborts generation for the whole document before any file is
written. None of them are retried; the declaration has to be fixed.
"""
from typing import Optional


class EntityGenError(Exception):
    """Base exception for entity generation."""

    def __init__(self, message: str, entity: Optional[str] = None, field: Optional[str] = None):
        self.entity = entity
        self.field = field
        super().__init__(message)


class StructRequired(EntityGenError):
    """Raised when a declaration is not a plain field-carrying record."""

    def __init__(self, entity: Optional[str] = None, kind: Optional[str] = None):
        self.kind = kind
        super().__init__(
            f"entity declaration must be a struct with named fields, got {kind or 'unknown'} shape",
            entity=entity,
        )


class FieldRequired(EntityGenError):
    """Raised when a field has no stable identifier."""

    def __init__(self, entity: Optional[str] = None, position: Optional[int] = None):
        self.position = position
        super().__init__(
            f"field at position {position} has no name; every field must be named",
            entity=entity,
        )


class MissingKeyName(EntityGenError):
    """Raised when a key-tagged field has neither a key name nor a field name."""

    def __init__(self, entity: Optional[str] = None, position: Optional[int] = None):
        self.position = position
        super().__init__(
            f"key on field at position {position} must be named, "
            "either explicitly or on a named field",
            entity=entity,
        )


class AnnotationParseError(EntityGenError):
    """Raised when annotation arguments have the wrong type or shape."""


class DuplicateField(EntityGenError):
    """Raised when a field identifier is declared more than once."""

    def __init__(self, entity: Optional[str] = None, field: Optional[str] = None):
        super().__init__(f"field '{field}' is declared more than once", entity=entity, field=field)


class OrphanKeyComponent(EntityGenError):
    """Raised when a key references a field that is not part of the entity."""

    def __init__(self, entity: Optional[str] = None, key: Optional[str] = None, field: Optional[str] = None):
        self.key = key
        super().__init__(
            f"key '{key}' references field '{field}' which is not declared on the entity",
            entity=entity,
            field=field,
        )
