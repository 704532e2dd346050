"""CLI entrypoints for idlwrap commands."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigError, IdlWrapConfig, ModuleConfig, SourceConfig, load_config
from .errors import IdlWrapError
from .logging import PHASES, configure_logging
from .transformer import Transformer


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idlwrap",
        description="Generate Python wrapper modules from WebIDL definitions.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Resolve the configured IDL sources and write wrapper modules.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "--debug-phase",
        action="append",
        default=[],
        choices=PHASES,
        help="Enable debug output for one build phase only (repeatable).",
    )
    generate_parser.add_argument(
        "config",
        nargs="?",
        default=".",
        help="Path to .idlwrap.yml or the directory containing it (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--output-dir",
        help="Directory receiving the generated modules (overrides output_dir).",
    )
    generate_parser.add_argument(
        "--source",
        action="append",
        default=[],
        metavar="IDL[:IMPL]",
        help="IDL file or directory, optionally followed by its implementation directory.",
    )
    generate_parser.add_argument(
        "--module",
        action="append",
        default=[],
        metavar="NAME[=DESCRIPTOR]",
        help="Importable module whose descriptor lists IDL files generated elsewhere.",
    )
    generate_parser.add_argument(
        "--util-path",
        help="Where to write the shared utility module (defaults to <output-dir>/utils.py).",
    )
    generate_parser.add_argument(
        "--impl-suffix",
        help="Suffix appended to interface names to find implementation modules.",
    )
    generate_parser.add_argument(
        "--suppress-errors",
        action="store_true",
        help="Skip definitions that cannot be resolved instead of failing.",
    )
    return parser


def _apply_overrides(config: IdlWrapConfig, args: argparse.Namespace) -> IdlWrapConfig:
    sources = list(config.sources)
    for value in args.source:
        idl, _, impl = value.partition(":")
        sources.append(SourceConfig(idl=Path(idl), impl=impl or None))
    modules = list(config.modules)
    for value in args.module:
        name, _, descriptor = value.partition("=")
        modules.append(ModuleConfig(name=name, descriptor=Path(descriptor) if descriptor else None))
    return replace(
        config,
        output_dir=Path(args.output_dir) if args.output_dir else config.output_dir,
        util_path=Path(args.util_path) if args.util_path else config.util_path,
        impl_suffix=args.impl_suffix or config.impl_suffix,
        suppress_errors=config.suppress_errors or bool(args.suppress_errors),
        sources=sources,
        modules=modules,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for idlwrap commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        debug_phases=getattr(args, "debug_phase", ()),
    )

    if args.command == "generate":
        try:
            config = _apply_overrides(load_config(Path(args.config)), args)
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        if config.output_dir is None:
            parser.exit(1, "No output directory configured. Pass --output-dir or set output_dir.\n")
        if not config.sources and not config.modules:
            parser.exit(1, "Nothing to generate. Declare sources in .idlwrap.yml or pass --source.\n")
        try:
            written = Transformer.from_config(config).generate(config.output_dir)
        except (IdlWrapError, ModuleNotFoundError, OSError) as exc:
            parser.exit(1, f"idlwrap generate failed: {exc}\nRun with --verbose for more details.\n")
        print(f"Generated {len(written)} modules in {_relativize(config.output_dir)}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
