"""
Command line for client generation.

Usage:
    declient generate myapp.contracts:IUserService
    declient generate myapp.contracts:IUserService myapp.contracts:IOrderService --write --out ./clients

Example:
    Generate sealed clients and persist their sources:
    ```bash
    declient generate myapp.contracts:IUserService \\
        --namespace myapp.clients \\
        --sealed \\
        --write \\
        --out ./build/clients
    ```
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import load_compiler_config
from .errors import DeclientError
from .generator import WebServiceClassGenerator

logger = logging.getLogger(__name__)


def resolve_contract(reference: str) -> type:
    """Import ``module:QualName`` (or ``module.QualName``) and return the object."""
    if ":" in reference:
        module_name, _, qualname = reference.partition(":")
    else:
        module_name, _, qualname = reference.rpartition(".")
    if not module_name or not qualname:
        raise ValueError(f"Expected module:Contract, got '{reference}'")
    target = importlib.import_module(module_name)
    for part in qualname.split("."):
        target = getattr(target, part)
    return target


def generate_command(args: argparse.Namespace) -> int:
    """
    Execute the generate command.

    Returns:
        0 when every contract generated, 1 otherwise
    """
    try:
        config = load_compiler_config(
            Path(args.config) if args.config else None,
            root_namespace=args.namespace,
            source_file_path=args.out,
            generate_sealed_classes=args.sealed,
            output_source_files=args.write,
        )
    except (OSError, ValueError) as exc:
        print(f"Error: cannot load configuration: {exc}", file=sys.stderr)
        return 1
    generator = WebServiceClassGenerator(config)

    status = 0
    for reference in args.contracts:
        try:
            contract = resolve_contract(reference)
        except (ImportError, AttributeError, ValueError) as exc:
            print(f"Error: cannot load {reference}: {exc}", file=sys.stderr)
            status = 1
            continue
        try:
            generated = generator.generate_source(contract)
        except DeclientError as exc:
            print(f"Error: {exc.format()}", file=sys.stderr)
            status = 1
            continue
        print(generated.full_class_name)
        if generated.path is not None:
            logger.info("Wrote %s", generated.path)
    return status


def add_generate_command(subparsers) -> None:
    """
    Add the generate subcommand.

    Args:
        subparsers: Argparse subparsers object
    """
    parser = subparsers.add_parser(
        "generate",
        help="Generate client classes from annotated contracts",
        description="Validate annotated contracts and emit their HTTP client classes",
    )
    parser.add_argument(
        "contracts",
        nargs="+",
        metavar="module:Contract",
        help="Contract classes to generate clients for",
    )
    parser.add_argument(
        "--namespace",
        help="Module name for generated clients (default: declient.generated)",
    )
    parser.add_argument(
        "--out",
        "-o",
        help="Directory for generated sources (default: ./declient-generated)",
    )
    parser.add_argument(
        "--sealed",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Decorate generated classes with typing.final",
    )
    parser.add_argument(
        "--write",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write generated sources to the output directory",
    )
    parser.add_argument(
        "--config",
        help="JSON or TOML config file (default: ./declient.toml if present)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.set_defaults(func=generate_command)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="declient",
        description="Generate HTTP clients from annotated interfaces",
    )
    add_generate_command(parser.add_subparsers(dest="command"))
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return 2
    return args.func(args)


__all__ = ["add_generate_command", "build_parser", "generate_command", "main", "resolve_contract"]
