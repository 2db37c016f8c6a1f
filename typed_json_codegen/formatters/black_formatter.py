"""
Black formatter for generated Python code.
"""

from __future__ import annotations

from ..errors import ConfigurationError

_TARGET_VERSIONS = {
    "py312": "PY312",
    "py313": "PY313",
}


def format_with_black(
    code: str,
    line_length: int = 100,
    target_version: str = "py312",
) -> str:
    """
    Format Python code using black.

    Args:
        code: Python source code
        line_length: Maximum line length
        target_version: Python version target (e.g., "py312")

    Returns:
        Formatted code

    Raises:
        ConfigurationError: If black is not installed or the target version is unknown
    """
    try:
        import black
    except ImportError as e:
        raise ConfigurationError(
            "Formatting needs black: pip install 'typed_json_codegen[dev]'"
        ) from e

    version_name = _TARGET_VERSIONS.get(target_version)
    if version_name is None or not hasattr(black.TargetVersion, version_name):
        raise ConfigurationError(f"Unsupported black target version: {target_version}")

    mode = black.Mode(
        target_versions={getattr(black.TargetVersion, version_name)},
        line_length=line_length,
    )
    return black.format_str(code, mode=mode)
