import json
import logging
import sys

import click

from .backends import BACKENDS
from .config import CodeGeneratorConfig
from .driver import generate
from .errors import CodegenError
from .formatters import format_with_black
from .graph_loader import load_type_graph_file

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG with --verbose, WARNING otherwise."""
    level = logging.DEBUG if verbose else logging.WARNING
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    root_logger.addHandler(console_handler)


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--language", "-l", default="cpp", type=click.Choice(sorted(BACKENDS)))
@click.option(
    "--namespace",
    "-n",
    default=None,
    type=str,
    help="C++ namespace (overrides the config file)",
)
@click.option(
    "--format",
    "format_output",
    is_flag=True,
    default=False,
    help="Run black over generated Python code",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log progress at debug level")
@click.argument("graph", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", type=click.Path(resolve_path=True))
def typed_json_codegen(config, language, namespace, format_output, verbose, graph, output):
    """Generate typed declarations and JSON conversion code from a type-graph description."""
    setup_logging(verbose)

    try:
        if config is not None:
            with open(config) as f:
                config = CodeGeneratorConfig.from_dict(json.load(f))
        else:
            config = CodeGeneratorConfig()

        # CLI flag overrides config file if set
        if namespace is not None:
            config.namespace = namespace

        top_levels = load_type_graph_file(graph)
        result = generate(top_levels, language, config)

        out = result.source
        if format_output:
            if language != "python":
                raise click.UsageError("--format only applies to --language python")
            out = format_with_black(out)
    except CodegenError as e:
        raise click.ClickException(str(e)) from e

    for diagnostic in result.diagnostics:
        logger.warning("%s", diagnostic)

    with open(output, "w") as f:
        f.write(out)
    logger.debug("Wrote %s", output)
