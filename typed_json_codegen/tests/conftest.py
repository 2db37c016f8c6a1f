import itertools
import json
import sys
import types
from pathlib import Path

import pytest

from typed_json_codegen.graph_loader import load_type_graph

GRAPHS_PATH = Path(__file__).parent / "test_data" / "graphs"

_module_ids = itertools.count()


def read_graph_document(name: str) -> dict:
    with open(GRAPHS_PATH / f"{name}.json") as f:
        return json.load(f)


@pytest.fixture
def load_graph():
    """Build the top levels of a graph from test_data/graphs."""

    def load(name: str):
        return load_type_graph(read_graph_document(name))

    return load


@pytest.fixture
def load_module(monkeypatch):
    """Execute generated Python source as a real module."""

    def load(source: str) -> types.ModuleType:
        name = f"generated_module_{next(_module_ids)}"
        module = types.ModuleType(name)
        monkeypatch.setitem(sys.modules, name, module)
        exec(compile(source, f"<{name}>", "exec"), module.__dict__)
        return module

    return load
