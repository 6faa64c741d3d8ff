"""Orchestrator for entity repository generation."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from repogen.core.errors import AnnotationParseError, EntityGenError
from repogen.core.workflow import GenerationStage
from repogen.generators.entity_gen.descriptor import assemble_descriptor
from repogen.generators.entity_gen.render import module_name, render_package_init
from repogen.generators.entity_gen.render_entity import render_entity_module
from repogen.generators.entity_gen.types import EntityDescriptor, GeneratedFile
from repogen.generators.entity_gen.writer import write_files
from repogen.schemas.declaration import DeclarationDocument, RecordDeclaration, parse_document

log = logging.getLogger(__name__)


def load_declarations(path: Path) -> DeclarationDocument:
    """Read a JSON or YAML declaration document (chosen by file suffix)."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise AnnotationParseError(f"could not parse {path.name}: {e}") from e
    return parse_document(data)


def build_descriptors(records: List[RecordDeclaration]) -> List[EntityDescriptor]:
    """Assemble descriptors for every record; module names must not collide."""
    descriptors = []
    modules: Dict[str, str] = {}
    for record in records:
        descriptor = assemble_descriptor(record)
        module = module_name(descriptor)
        if module in modules:
            raise EntityGenError(
                f"records {modules[module]} and {descriptor.entity} both generate module '{module}'",
                entity=descriptor.entity,
            )
        modules[module] = descriptor.entity
        descriptors.append(descriptor)
    return descriptors


def render_files(document: DeclarationDocument, package_dir: str = "repos") -> List[GeneratedFile]:
    """
    Run the whole pipeline in memory.

    Args:
        document: Validated declaration document
        package_dir: Package directory, relative to the output directory

    Returns:
        List of GeneratedFile objects, package ``__init__.py`` first
    """
    return render_descriptors(build_descriptors(document.records), package_dir=package_dir)


def render_descriptors(descriptors: List[EntityDescriptor], package_dir: str = "repos") -> List[GeneratedFile]:
    """Render the package ``__init__.py`` and one module per descriptor."""
    files = [GeneratedFile(path=f"{package_dir}/__init__.py", content=render_package_init(descriptors))]
    for descriptor in descriptors:
        log.info(
            "Rendering repositories for %d keys", len(descriptor.keys),
            extra={"entity": descriptor.entity, "stage": str(GenerationStage.SYNTHESIZE)},
        )
        files.append(GeneratedFile(
            path=f"{package_dir}/{module_name(descriptor)}.py",
            content=render_entity_module(descriptor),
        ))
    return files


def generate_repositories(
    declarations_path: Path,
    out_dir: Path,
    package_dir: str = "repos",
) -> List[GeneratedFile]:
    """
    Generate repository modules from a declaration file.

    Args:
        declarations_path: Path to the JSON/YAML declaration document
        out_dir: Output directory for generated files
        package_dir: Package directory inside ``out_dir``

    Returns:
        List of GeneratedFile objects
    """
    document = load_declarations(declarations_path)
    files = render_files(document, package_dir=package_dir)

    write_files(files, out_dir)
    log.info(
        "Wrote %d files to %s", len(files), out_dir,
        extra={"entity": "-", "stage": str(GenerationStage.WRITE)},
    )
    return files


def generate_from_data(data: Any, package_dir: str = "repos") -> List[GeneratedFile]:
    """Validate an already-loaded document and render it without touching disk."""
    return render_files(parse_document(data), package_dir=package_dir)
