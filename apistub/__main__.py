"""Entry point: python -m apistub SPEC [-o OUTPUT]

Reads an OpenAPI document, builds the interface descriptor and renders it
for the chosen target. Without -o the source goes to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .codegen import generate, render
from .config import TARGETS, GeneratorConfig
from .context_builder import build_interface
from .errors import ApiStubError
from .loader import load_spec


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="apistub",
        description="Generate typed interface stubs from an OpenAPI document.",
    )
    parser.add_argument("spec", type=Path, help="OpenAPI document (JSON or YAML)")
    parser.add_argument("-o", "--output", type=Path, help="Write generated source here")
    parser.add_argument("-t", "--target", choices=TARGETS, default="python")
    parser.add_argument("--name", help="Interface name (default: from info.title)")
    parser.add_argument("--package", help="Package line for Kotlin output")
    parser.add_argument(
        "--response-param",
        action="store_true",
        help="Append a response-handle parameter to every method",
    )
    parser.add_argument(
        "--concrete",
        action="store_true",
        help="Emit a placeholder class instead of an interface",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = GeneratorConfig(
        include_response_param=args.response_param,
        generate_interface=not args.concrete,
        target=args.target,
        interface_name=args.name,
        package=args.package,
    )

    try:
        spec = load_spec(args.spec)
        interface = build_interface(spec, config)
    except ApiStubError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.output is None:
        sys.stdout.write(render(interface, config))
    else:
        path = generate(interface, config, args.output)
        print(f"Generated {path} ({len(interface.methods)} methods, {len(interface.declarations)} types)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
