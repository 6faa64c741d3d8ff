"""File writer for repository generation."""
from pathlib import Path
from typing import List
from repogen.generators.entity_gen.types import GeneratedFile


def write_files(files: List[GeneratedFile], out_dir: Path) -> None:
    """
    Write generated files to the output directory.

    Args:
        files: List of GeneratedFile objects to write
        out_dir: Base output directory path
    """
    out_dir.mkdir(parents=True, exist_ok=True)

    for file in files:
        file_path = out_dir / file.path
        # Create parent directories if needed
        file_path.parent.mkdir(parents=True, exist_ok=True)
        # Write file content
        file_path.write_text(file.content, encoding="utf-8")


def stale_files(files: List[GeneratedFile], out_dir: Path) -> List[str]:
    """
    Compare rendered files with what is on disk.

    Returns:
        Relative paths that are missing or whose content differs
    """
    stale = []
    for file in files:
        file_path = out_dir / file.path
        if not file_path.exists() or file_path.read_text(encoding="utf-8") != file.content:
            stale.append(file.path)
    return stale
