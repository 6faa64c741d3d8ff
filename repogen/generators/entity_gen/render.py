"""Package-level rendering for generated repository modules."""
from typing import List

from repogen.generators.entity_gen.render_entity import (
    interface_name,
    pool_repo_name,
    record_type_name,
    transaction_repo_name,
)
from repogen.generators.entity_gen.types import EntityDescriptor


def module_name(descriptor: EntityDescriptor) -> str:
    return descriptor.snake_name


def render_package_init(descriptors: List[EntityDescriptor]) -> str:
    """Generate the package ``__init__.py`` re-exporting every repository.

    Args:
        descriptors: Entities in declaration order
    """
    lines = ['"""Generated repositories. DO NOT EDIT."""']
    exported = []
    for descriptor in descriptors:
        names = []
        if descriptor.model_path is None:
            names.append(record_type_name(descriptor))
        names.extend([
            interface_name(descriptor),
            pool_repo_name(descriptor),
            transaction_repo_name(descriptor),
        ])
        lines.append(f"from .{module_name(descriptor)} import {', '.join(names)}")
        exported.extend(names)

    lines.append("")
    lines.append("__all__ = [")
    for name in exported:
        lines.append(f'    "{name}",')
    lines.append("]")
    return "\n".join(lines) + "\n"
