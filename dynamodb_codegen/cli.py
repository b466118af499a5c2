"""
Command line interface for codec generation.

Usage:
  dynamodb-codegen generate app.models --output src --package app.codecs
  dynamodb-codegen inspect app.models
"""

import argparse
import sys
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from .core.classifier import CodecNaming, SchemaAnalyzer, TypeClassifier
from .core.config import ConfigError, GeneratorConfig, load_config
from .core.dependencies import DependencyResolver
from .core.generator import GenerationResult, GeneratorError
from .core.source import ModuleSchemaSource
from .core.writer import FileCodeWriter, InMemoryCodeWriter
from .logging_config import get_logger, setup_logging
from .pipeline import CodecGenerationPipeline

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser with generate and inspect subcommands."""
    parser = argparse.ArgumentParser(
        prog="dynamodb-codegen",
        description="Generate DynamoDB attribute value codecs from annotated dataclasses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dynamodb-codegen generate app.models -o src --package app.codecs
  dynamodb-codegen generate app.models --dry-run --show-source
  dynamodb-codegen inspect app.models
        """.strip(),
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate codec modules")
    _add_common_args(generate)
    generate.add_argument(
        "--output", "-o", metavar="DIR", help="Directory receiving the generated package"
    )
    generate.add_argument(
        "--dry-run",
        action="store_true",
        help="Render everything but write nothing",
    )
    generate.add_argument(
        "--show-source",
        action="store_true",
        help="Print generated modules (implies --dry-run without --output)",
    )
    generate.add_argument(
        "--no-comments", action="store_true", help="Omit header comments"
    )
    generate.add_argument(
        "--no-wiring", action="store_true", help="Do not generate create_codecs()"
    )
    generate.add_argument(
        "--verbose", action="store_true", help="Show generation metadata"
    )
    generate.set_defaults(func=_handle_generate)

    inspect = subparsers.add_parser(
        "inspect", help="Show field classification and generation order"
    )
    _add_common_args(inspect)
    inspect.set_defaults(func=_handle_inspect)

    return parser


def _add_common_args(parser: argparse.ArgumentParser):
    parser.add_argument("modules", nargs="+", help="Modules defining @dynamo_mappable classes")
    parser.add_argument("--config", metavar="FILE", help="JSON configuration file")
    parser.add_argument(
        "--package", "--package-name", dest="package_name", metavar="NAME",
        help="Package of the generated modules",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Warn and fall back to nested-object mapping for unsupported types",
    )
    parser.add_argument(
        "--map-placeholder",
        action="store_true",
        help="Emit no-op placeholders for dict fields instead of failing",
    )


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from CLI arguments."""
    overrides = {}

    if args.package_name:
        overrides["package_name"] = args.package_name
    if args.lenient:
        overrides["strict_classification"] = False
    if args.map_placeholder:
        overrides["map_fields"] = "placeholder"
    if getattr(args, "output", None):
        overrides["output_dir"] = args.output
    if getattr(args, "no_comments", False):
        overrides["add_comments"] = False
    if getattr(args, "no_wiring", False):
        overrides["generate_wiring"] = False

    try:
        return load_config(custom_config=overrides, config_file=args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e


def _handle_generate(args: argparse.Namespace) -> int:
    config = _build_config(args)

    if args.dry_run or (args.show_source and not config.output_dir):
        writer = InMemoryCodeWriter()
    elif config.output_dir:
        writer = FileCodeWriter(config.output_dir)
    else:
        raise CLIError("--output is required unless --dry-run or --show-source is given")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("[cyan]Generating codecs...", total=None)
        result = CodecGenerationPipeline(config, writer).run(
            ModuleSchemaSource(args.modules)
        )

    _print_result(result, args)

    if args.show_source and isinstance(writer, InMemoryCodeWriter):
        for module, source in writer.modules.items():
            console.print(Panel(Syntax(source, "python", theme="monokai"), title=module))

    return 0 if result.success else 1


def _print_result(result: GenerationResult, args: argparse.Namespace):
    table = Table(title="📦 Generated Modules", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Module", style="bold green")
    table.add_column("Location", style="dim")
    for module, location in result.files.items():
        table.add_row(module, location)
    console.print(table)

    if args.verbose:
        metadata_table = Table(
            title="📊 Generation Metadata",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        metadata_table.add_column("Property", style="bold")
        metadata_table.add_column("Value", style="green")
        for key, value in result.metadata.items():
            metadata_table.add_row(key.replace("_", " ").title(), str(value))
        metadata_table.add_row("Order", " → ".join(result.order))
        console.print(metadata_table)

    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")

    if result.failures:
        console.print("\n[red]✗ Failures:[/red]")
        for identity, message in result.failures.items():
            console.print(f"  [red]•[/red] {identity}: {message}")
    else:
        console.print(f"[green]✓[/green] Generated {len(result.files)} modules")


def _handle_inspect(args: argparse.Namespace) -> int:
    config = _build_config(args)
    naming = CodecNaming.from_config(config)
    analyzer = SchemaAnalyzer(
        TypeClassifier(naming, strict=config.strict_classification), naming
    )

    discovered_types = ModuleSchemaSource(args.modules).discover()
    entities = [analyzer.analyze(discovered) for discovered in discovered_types]
    ordered = DependencyResolver().resolve(entities)

    for entity in ordered:
        title = entity.identity
        if entity.is_table:
            title += f" [dim](table: {entity.table_name})[/dim]"
        table = Table(title=title, box=box.SIMPLE, header_style="bold cyan")
        table.add_column("Field", style="bold")
        table.add_column("Type")
        table.add_column("Strategy", style="green")
        table.add_column("Primitive")
        table.add_column("Codec", style="dim")
        for descriptor in entity.fields:
            table.add_row(
                descriptor.name,
                descriptor.type_name,
                descriptor.strategy.name,
                "yes" if descriptor.primitive else "",
                descriptor.mapper_dependency or "",
            )
        console.print(table)

    console.print(
        Panel(
            "\n".join(f"{index}. {entity.identity}" for index, entity in enumerate(ordered, 1)),
            title="🔗 Generation Order",
            border_style="blue",
        )
    )
    for warning in analyzer.warnings:
        console.print(f"[yellow]⚠️  {warning}[/yellow]")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the ``dynamodb-codegen`` command.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        return args.func(args)
    except CLIError as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 2
    except GeneratorError as e:
        logger.debug("Generation aborted", exc_info=True)
        console.print(f"[red]✗ Code generation failed:[/red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
