"""Command-line front end.

Non-interactive: features, variables and install preferences all come from
arguments.  Dependency installation is never spawned; the chosen installer
only shapes the printed next steps.

Usage::

    template-composer my-api -f requestContext -f workers
    template-composer . --all --installer npm
    template-composer --list
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import traceback
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .composer import Composer, CompositionResult
from .config import ComposerConfig
from .errors import ComposeError
from .registry import FeatureRegistry, FeatureSelection
from .utils import console, print_error, print_summary_table


def _parse_vars(pairs: list[str]) -> dict[str, str]:
    """Turn ``["KEY=VALUE", ...]`` into a mapping."""
    values: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Invalid --var {pair!r}, expected KEY=VALUE")
        values[key.strip()] = value
    return values


def _split_features(raw: list[str]) -> list[str]:
    return [part.strip() for item in raw for part in item.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="template-composer",
        description="Compose a project from a base template and optional feature modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  template-composer my-api -f requestContext -f workers\n"
            "  template-composer . --all --installer npm\n"
            "  template-composer --list\n"
        ),
    )
    parser.add_argument(
        "project",
        nargs="?",
        default=".",
        help="Project name, or '.' to scaffold into the current directory (default: .)",
    )
    parser.add_argument(
        "--feature", "-f",
        action="append",
        default=[],
        help="Feature key to include; repeat or comma-separate for several (order matters)",
    )
    parser.add_argument("--all", action="store_true", help="Include every registered feature")
    parser.add_argument("--list", action="store_true", help="List available features and exit")
    parser.add_argument(
        "--template-root",
        type=Path,
        default=None,
        help="Template root holding base/, modules/ and features-config.json",
    )
    parser.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra {{KEY}} template variable (repeatable)",
    )
    parser.add_argument(
        "--install",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Plan dependency installation in the next steps (default: yes)",
    )
    parser.add_argument(
        "--installer",
        choices=["npm", "yarn", "pnpm"],
        default="pnpm",
        help="Package manager for the next steps (default: pnpm)",
    )
    return parser


def print_feature_table(registry: FeatureRegistry, out: Console | None = None) -> None:
    """Render the registry as a Rich table in declaration order."""
    table = Table(title="Available features", show_header=True, header_style="bold cyan")
    table.add_column("Key", no_wrap=True)
    table.add_column("Name")
    table.add_column("Description", style="dim")
    for feature in registry:
        table.add_row(feature.key, feature.name, feature.description)
    (out or console).print(table)


def print_next_steps(
    result: CompositionResult, selection: FeatureSelection, out: Console | None = None
) -> None:
    """Print the post-scaffold summary and installer-specific next steps."""
    target = out or console
    print_summary_table(
        {
            "Project": result.project_name,
            "Location": str(result.target_dir),
            "Features": ", ".join(result.features) or "Base template only",
            "Markers applied": str(len(result.applied_markers)),
            "Injections skipped": str(len(result.skipped_injections)),
        },
        title="Scaffold summary",
        out=target,
    )
    target.print("[bold blue]Next steps:[/bold blue]")
    if selection.install_dependencies:
        target.print(f"  1. Install dependencies: {selection.install_command}")
        dev_command = selection.dev_command
    else:
        target.print("  1. Install dependencies: npm install (or yarn/pnpm)")
        dev_command = FeatureSelection(installer="npm").dev_command
    target.print("  2. Configure environment variables in .env")
    target.print(f"  3. Start development: {dev_command}")


async def _run(args: argparse.Namespace, config: ComposerConfig) -> None:
    composer = Composer(config)
    registry = await composer.load_registry()

    if args.list:
        print_feature_table(registry)
        return

    features = registry.keys() if args.all else _split_features(args.feature)
    selection = FeatureSelection(
        features=features,
        install_dependencies=args.install,
        installer=args.installer,
    )
    result = await composer.scaffold(Path.cwd(), args.project, selection, _parse_vars(args.var))
    print_next_steps(result, selection)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``template-composer`` / ``python -m template_composer``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        _parse_vars(args.var)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    try:
        config = ComposerConfig.from_env(template_root=args.template_root)
        asyncio.run(_run(args, config))
    except ComposeError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    except Exception:
        print_error("Error during scaffolding:")
        console.print(traceback.format_exc())
        sys.exit(1)


if __name__ == "__main__":
    main()
