# SPDX-License-Identifier: MIT
"""Command-line interface for modgen."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from modgen.annotations import GENERATE_MODULE
from modgen.catalog import TypeCatalog
from modgen.config import Options, parse_options
from modgen.core.errors import ModgenError
from modgen.model.values import (
    ERROR_SENTINEL,
    AnnotationValue,
    ArrayValue,
    OtherValue,
    StringValue,
    TypeRef,
)
from modgen.processing.driver import generate
from modgen.processing.filer import is_generated, read_manifest
from modgen.processors import default_processors

# Set up logging
logger = logging.getLogger("modgen")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def source_roots(args: argparse.Namespace) -> list[Path]:
    """Source roots from the command line, defaulting to the current dir."""
    return [Path(p) for p in (getattr(args, "sources", None) or ["."])]


def make_options(args: argparse.Namespace) -> Options:
    """Build processor options from -A KEY=value and -o arguments."""
    values, bad = parse_options(getattr(args, "options", None) or [])
    for arg in bad:
        logger.warning("Ignoring malformed option %r (expected KEY=value)", arg)
    output = getattr(args, "output_dir", None)
    if output:
        values["output_dir"] = output
    manifest = getattr(args, "manifest", None)
    if manifest:
        values["manifest"] = manifest
    return Options(values)


def format_value(value: AnnotationValue) -> str:
    """Render a decorator argument for display."""
    match value:
        case TypeRef():
            return value.qualified_name
        case ArrayValue(items=items):
            return "[" + ", ".join(format_value(v) for v in items) + "]"
        case StringValue(value=text) if text == ERROR_SENTINEL:
            return "<unresolved>"
        case StringValue(value=text):
            return repr(text)
        case OtherValue(value=other, kind=kind):
            return f"{other!r} ({kind})"
        case _:
            return repr(value)


def cmd_generate(args: argparse.Namespace) -> int:
    """Run processors over the source roots.

    This command:
    1. Parses every .py file under the source roots
    2. Writes Gen_<Name>.py for each @generate_module class
    3. Writes the originating-source manifest
    """
    setup_logging(args.verbose, args.debug)

    try:
        options = make_options(args)
        result = generate(source_roots(args), default_processors(), options)
    except ModgenError as e:
        logger.error("%s", e)
        return 1

    logger.info(
        "%d file(s) generated in %d round(s), %d error(s), %d warning(s)",
        len(result.generated),
        result.rounds,
        result.errors,
        result.warnings,
    )
    return 0 if result.success else 1


def cmd_list(args: argparse.Namespace) -> int:
    """List @generate_module declarations without generating anything."""
    setup_logging(args.verbose, args.debug)

    try:
        catalog = TypeCatalog.from_roots(source_roots(args))
    except ModgenError as e:
        logger.error("%s", e)
        return 1

    elements = catalog.find_annotated(GENERATE_MODULE)
    if not elements:
        print("No @generate_module declarations found")
        return 0

    for element in elements:
        attributes = " ".join(
            f"{name}={format_value(value)}"
            for name, value in catalog.attributes_of(element, GENERATE_MODULE)
        )
        visibility = "public" if element.is_public else "private"
        print(f"{element.qualified_name} ({visibility}): {attributes}")
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    """Remove files listed in the manifest, then the manifest itself.

    Only files that still carry the generated-code header are removed.
    """
    setup_logging(args.verbose, args.debug)

    try:
        options = make_options(args)
        output_dir = options.output_dir(source_roots(args)[0])
        manifest = options.manifest_path(output_dir)
    except ModgenError as e:
        logger.error("%s", e)
        return 1

    generated = read_manifest(manifest)
    if not generated and not manifest.exists():
        logger.info("No manifest at %s, nothing to clean", manifest)
        return 0

    for name in sorted(generated):
        path = Path(name)
        if not path.exists():
            continue
        if not is_generated(path):
            logger.warning("Not removing %s: not generated by modgen", path)
            continue
        logger.info("Removing %s", path)
        path.unlink()

    manifest.unlink(missing_ok=True)
    logger.info("Clean complete")
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument(
        "sources",
        nargs="*",
        metavar="SOURCE_ROOT",
        help="Source root directories (default: current directory)",
    )


def add_output_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments locating generated output."""
    parser.add_argument(
        "-o",
        "--output-dir",
        help="Directory generated packages are written under "
        "(default: the first source root)",
    )
    parser.add_argument(
        "-m", "--manifest", help="Manifest path (default: <output-dir>/modgen_manifest.json)"
    )
    parser.add_argument(
        "-A",
        dest="options",
        action="append",
        metavar="KEY=VALUE",
        help="Processor option (repeatable)",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the modgen CLI."""
    parser = argparse.ArgumentParser(
        prog="modgen",
        description="Generate injector modules from @generate_module classes.",
        epilog="Run 'modgen <command> --help' for command-specific help.",
    )
    from modgen import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # modgen generate
    gen_parser = subparsers.add_parser(
        "generate", help="Generate modules for @generate_module classes"
    )
    add_common_args(gen_parser)
    add_output_args(gen_parser)
    gen_parser.set_defaults(func=cmd_generate)

    # modgen list
    list_parser = subparsers.add_parser(
        "list", help="List @generate_module classes and their arguments"
    )
    add_common_args(list_parser)
    list_parser.set_defaults(func=cmd_list)

    # modgen clean
    clean_parser = subparsers.add_parser(
        "clean", help="Remove generated files recorded in the manifest"
    )
    add_common_args(clean_parser)
    add_output_args(clean_parser)
    clean_parser.set_defaults(func=cmd_clean)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
