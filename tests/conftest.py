"""Shared fixtures for entity repository generation tests."""
import importlib
import uuid
from pathlib import Path

import pytest

from repogen.generators.entity_gen import generate_from_data
from repogen.generators.entity_gen.writer import write_files


def my_entity_data():
    """MyEntity with a unique id, a unique composite key, a list key and a plain field."""
    return {
        "record": "MyEntity",
        "entity": {"table_name": "my_entity"},
        "fields": [
            {"name": "id", "type": "UUID", "key": {"name": "id", "unique": True}},
            {"name": "name", "type": "Text", "key": {"name": "name_version", "unique": True}},
            {"name": "version", "type": "Int", "key": {"name": "name_version", "unique": True}},
            {"name": "color", "type": "Text", "key": {"name": "color"}},
            {"name": "description", "type": "Text"},
        ],
    }


@pytest.fixture
def my_entity():
    return my_entity_data()


@pytest.fixture
def load_generated(tmp_path, monkeypatch):
    """Write generated files under a unique package and import one of its modules."""
    def _load(data, module):
        package = f"generated_{uuid.uuid4().hex[:8]}"
        if "record" in data:
            data = {"records": [data]}
        files = generate_from_data(data, package_dir=package)
        write_files(files, Path(tmp_path))
        monkeypatch.syspath_prepend(str(tmp_path))
        return importlib.import_module(f"{package}.{module}")
    return _load
