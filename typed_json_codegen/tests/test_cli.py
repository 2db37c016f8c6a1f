import json
import logging
import shutil
from pathlib import Path

import pytest
from click.testing import CliRunner

from typed_json_codegen.typed_json_codegen import typed_json_codegen

GRAPHS_PATH = Path(__file__).parent / "test_data" / "graphs"


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI replaces the root logger's handlers."""
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)


@pytest.fixture
def graph(tmp_path):
    path = tmp_path / "welcome.json"
    shutil.copy(GRAPHS_PATH / "welcome.json", path)
    return path


def test_cpp_by_default(tmp_path, graph):
    output = tmp_path / "welcome.hpp"

    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(output)])

    assert result.exit_code == 0, result.output
    header = output.read_text()
    assert "namespace quicktype {" in header
    assert "struct Welcome {" in header


def test_diagnostics_are_reported_as_warnings(tmp_path, graph):
    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(tmp_path / "out.hpp")])

    assert result.exit_code == 0
    assert "WARNING" in result.output
    assert "nlohmann::json: The type of this value cannot be determined" in result.output


def test_python_output(tmp_path, graph):
    output = tmp_path / "welcome.py"

    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(output), "--language", "python"])

    assert result.exit_code == 0, result.output
    assert "def decode_Welcome(obj: Any) -> Welcome:" in output.read_text()


def test_namespace_overrides_config_file(tmp_path, graph):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"namespace": "from_file", "add_generation_comment": False}))
    output = tmp_path / "welcome.hpp"

    result = CliRunner().invoke(
        typed_json_codegen,
        [str(graph), str(output), "--config", str(config), "--namespace", "from_cli"],
    )

    assert result.exit_code == 0, result.output
    header = output.read_text()
    assert "namespace from_cli {" in header
    assert "from_file" not in header
    assert "To parse this JSON data" not in header


def test_bad_config_file(tmp_path, graph):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"namespace": "x", "tabs": True}))
    output = tmp_path / "welcome.hpp"

    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(output), "--config", str(config)])

    assert result.exit_code == 1
    assert "Unknown configuration option(s): tabs" in result.output
    assert not output.exists()


def test_bad_namespace(tmp_path, graph):
    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(tmp_path / "o.hpp"), "--namespace", "class"])

    assert result.exit_code == 1
    assert "reserved word" in result.output


def test_malformed_graph(tmp_path):
    graph = tmp_path / "graph.json"
    graph.write_text(json.dumps({"topLevels": {"a": "Nowhere"}}))

    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(tmp_path / "o.hpp")])

    assert result.exit_code == 1
    assert "undefined type 'Nowhere'" in result.output


def test_unknown_language(tmp_path, graph):
    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(tmp_path / "o.x"), "--language", "cobol"])

    assert result.exit_code == 2


def test_format_only_applies_to_python(tmp_path, graph):
    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(tmp_path / "o.hpp"), "--format"])

    assert result.exit_code == 2
    assert "--format only applies to --language python" in result.output


def test_format_python(tmp_path, graph):
    pytest.importorskip("black")
    output = tmp_path / "welcome.py"

    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(output), "-l", "python", "--format"])

    assert result.exit_code == 0, result.output
    compile(output.read_text(), str(output), "exec")


def test_verbose_logs_progress(tmp_path, graph):
    result = CliRunner().invoke(typed_json_codegen, [str(graph), str(tmp_path / "o.hpp"), "--verbose"])

    assert result.exit_code == 0
    assert "DEBUG - Rendering 1 classes, 1 unions and 0 aliases with the cpp backend" in result.output
