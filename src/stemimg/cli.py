#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/cli.py
"""Command-line interface for stemimg.

Reads a document tree serialized as JSON, replaces its equations with
rendered images and writes the rewritten tree to a file or stdout.

    stemimg doc.json -o doc.out.json --format svg --imagesdir images

Values are taken from, in increasing priority: the document's own
attributes, a configuration file, and command-line flags.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any, Optional

from stemimg import __version__
from stemimg.api import is_supported_backend, load_document, process_document, save_document
from stemimg.ast.serialization import ast_to_json
from stemimg.config import CONFIG_ENV_VAR, load_config_with_priority, merge_configs
from stemimg.constants import ATTR_IMAGESDIR, ATTR_IMAGESOUTDIR, OPTION_TO_DIR, SUPPORTED_FORMATS
from stemimg.exceptions import DependencyError, FileError, RenderingError, StemImgError, ValidationError
from stemimg.logging_utils import configure_logging
from stemimg.transforms.stem import ProcessingReport

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_DEPENDENCY_ERROR = 2
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4
EXIT_RENDERING_ERROR = 7


def get_exit_code_for_exception(exception: Exception) -> int:
    """Map an exception to an appropriate CLI exit code.

    Parameters
    ----------
    exception : Exception
        The exception to map to an exit code

    Returns
    -------
    int
        The appropriate exit code for the exception type

    """
    if isinstance(exception, (DependencyError, ImportError)):
        return EXIT_DEPENDENCY_ERROR

    if isinstance(exception, (ValidationError, argparse.ArgumentTypeError)):
        return EXIT_VALIDATION_ERROR

    if isinstance(exception, FileError):
        return EXIT_FILE_ERROR

    # OutputWriteError is a RenderingError
    if isinstance(exception, RenderingError):
        return EXIT_RENDERING_ERROR

    return EXIT_ERROR


def parse_attribute(value: str) -> tuple[str, str]:
    """Parse a ``NAME=VALUE`` attribute argument; a bare ``NAME`` sets it to "".

    Raises
    ------
    argparse.ArgumentTypeError
        If the name is empty

    """
    name, _, attr_value = value.partition("=")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid attribute '{value}', expected NAME=VALUE")
    return name, attr_value


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="stemimg",
        description="Replace STEM equations in a JSON document tree with rendered images.",
    )
    parser.add_argument("input", help="Input document tree (JSON)")
    parser.add_argument("-o", "--output", help="Output file for the rewritten tree (default: stdout)")

    render_group = parser.add_argument_group("rendering options")
    render_group.add_argument("--format", choices=list(SUPPORTED_FORMATS), help="Image format for equations")
    render_group.add_argument("--ppi", type=float, help="Raster resolution for png output (default: 300)")
    render_group.add_argument(
        "--inline",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Embed equations in the document instead of writing image files",
    )

    output_group = parser.add_argument_group("output locations")
    output_group.add_argument("--to-dir", dest="to_dir", help="Base output directory of the conversion")
    output_group.add_argument("--imagesdir", help="Images directory, relative to the output directory")
    output_group.add_argument("--imagesoutdir", help="Directory equation images are written to (overrides the above)")

    doc_group = parser.add_argument_group("document")
    doc_group.add_argument(
        "-a",
        "--attribute",
        dest="attributes",
        action="append",
        type=parse_attribute,
        default=[],
        metavar="NAME=VALUE",
        help="Set a document attribute (repeatable)",
    )
    doc_group.add_argument("--backend", help="Backend of the document (default: the document's own, else html5)")
    doc_group.add_argument("--force", action="store_true", help="Process documents whose backend is not pdf")

    config_group = parser.add_argument_group("configuration")
    config_group.add_argument("--config", help=f"Configuration file (default: discovered, or ${CONFIG_ENV_VAR})")
    config_group.add_argument("--no-config", action="store_true", help="Ignore configuration files")

    log_group = parser.add_argument_group("logging and output")
    log_group.add_argument("--rich", action="store_true", help="Print a table of written artifacts")
    log_group.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    log_group.add_argument("--log-file", help="Also write log output to this file")
    log_group.add_argument("--trace", action="store_true", help="Verbose log format with timestamps")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def build_settings(parsed_args: argparse.Namespace, config: dict[str, Any]) -> dict[str, Any]:
    """Merge configuration file values with command-line values.

    Returns a dict with the config keys; command-line values that were given
    replace the config values and ``-a`` attributes are merged into the
    ``attributes`` table.
    """
    cli_values: dict[str, Any] = {
        key: getattr(parsed_args, key)
        for key in ("format", "ppi", "inline", "imagesdir", "imagesoutdir", "to_dir", "backend")
        if getattr(parsed_args, key) is not None
    }
    if parsed_args.attributes:
        cli_values["attributes"] = dict(parsed_args.attributes)
    return merge_configs(config, cli_values)


def apply_settings(document: Any, settings: dict[str, Any]) -> None:
    """Apply merged settings to a loaded document; they replace its own values."""
    attributes = dict(settings.get("attributes") or {})
    for key, attr_name in (("imagesdir", ATTR_IMAGESDIR), ("imagesoutdir", ATTR_IMAGESOUTDIR)):
        if settings.get(key) is not None:
            attributes[attr_name] = settings[key]
    document.attributes.update({name: str(value) for name, value in attributes.items()})

    if settings.get("to_dir") is not None:
        document.options[OPTION_TO_DIR] = str(settings["to_dir"])
    if settings.get("backend"):
        document.backend = str(settings["backend"])


def print_report(report: ProcessingReport) -> None:
    """Print the written artifacts as a rich table on stderr."""
    from rich.console import Console
    from rich.table import Table

    console = Console(stderr=True)
    table = Table(title=f"Rendered equations ({report.rendered}, {report.documents} document(s))")
    table.add_column("Artifact", style="cyan")
    table.add_column("Path", style="green", no_wrap=False)
    table.add_column("Size", style="magenta", justify="right")

    for record in report.artifacts:
        table.add_row(record.id, record.target, f"{record.width}x{record.height}")
    for embedded in report.embedded:
        table.add_row("(embedded)", "-", f"{embedded.width}x{embedded.height}")

    console.print(table)


def main(args: Optional[list[str]] = None) -> int:
    """Execute the command line."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    configure_logging(parsed_args.log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)

    try:
        config: dict[str, Any] = {}
        if not parsed_args.no_config:
            config = load_config_with_priority(parsed_args.config, os.environ.get(CONFIG_ENV_VAR))
        settings = build_settings(parsed_args, config)
    except argparse.ArgumentTypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        document = load_document(parsed_args.input)
        apply_settings(document, settings)

        if is_supported_backend(document) or parsed_args.force:
            report = process_document(
                document,
                format=settings.get("format"),
                ppi=settings.get("ppi"),
                inline=settings.get("inline"),
            )
        else:
            logger.warning(
                "Backend '%s' typesets math natively; leaving equations as they are (use --force to render)",
                document.resolve_backend(),
            )
            report = ProcessingReport()

        if parsed_args.output:
            save_document(document, parsed_args.output)
        else:
            sys.stdout.write(ast_to_json(document, indent=2) + "\n")
    except StemImgError as e:
        logger.debug("Processing failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return get_exit_code_for_exception(e)

    if parsed_args.rich:
        print_report(report)
    else:
        logger.info("Rendered %d equation(s)", report.rendered)

    return EXIT_SUCCESS
