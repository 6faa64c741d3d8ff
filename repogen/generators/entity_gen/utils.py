"""Utility functions for entity repository generation."""
import re


def to_snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name)
    s2 = re.sub('([a-z0-9])([A-Z])', r'\1_\2', s1)
    return s2.lower()


def to_constant_case(name: str) -> str:
    """Convert an identifier to UPPER_SNAKE_CASE for module-level constants."""
    return to_snake_case(name).upper()


def split_model_path(model_path: str) -> tuple:
    """Split "package.module:Name" into ("package.module", "Name")."""
    module, _, name = model_path.partition(":")
    return module, name
