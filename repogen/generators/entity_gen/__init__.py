from repogen.generators.entity_gen.generator import (
    generate_from_data,
    generate_repositories,
    load_declarations,
    render_files,
)

__all__ = [
    "generate_from_data",
    "generate_repositories",
    "load_declarations",
    "render_files",
]
