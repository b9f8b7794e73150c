from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path

from .artifacts import ARTIFACTS_BY_NAME, ArtifactKind
from .common import Diagnostics, IccCodegenError
from .config import DEFAULT_FUNCTIONS_FILE, GeneratorConfig, load_config
from .pipeline import build_context, generate, run_generation


def add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to generator config JSON.")
    parser.add_argument("--functions", help=f"Function list to encapsulate (default: {DEFAULT_FUNCTIONS_FILE}).")
    parser.add_argument("--legacy", help="Function list of the older ICC to stay compatible with.")
    parser.add_argument("--version-file", help="File whose first line is the ICC version.")


def resolve_config(args: argparse.Namespace) -> GeneratorConfig:
    if args.config:
        config = load_config(Path(args.config).resolve())
    else:
        config = GeneratorConfig(functions_path=Path(DEFAULT_FUNCTIONS_FILE))

    overrides: dict[str, object] = {}
    if args.functions:
        overrides["functions_path"] = Path(args.functions)
    if args.legacy:
        overrides["legacy_path"] = Path(args.legacy)
    if args.version_file:
        overrides["version_file"] = Path(args.version_file)
    if getattr(args, "output_root", None):
        overrides["output_root"] = Path(args.output_root)
    return replace(config, **overrides) if overrides else config


def print_diagnostics(diagnostics: Diagnostics) -> None:
    for diagnostic in diagnostics:
        print(diagnostic.render(), file=sys.stderr)


def command_generate(args: argparse.Namespace) -> int:
    config = resolve_config(args)
    result, reports = run_generation(config, check=args.check, dry_run=args.dry_run)
    print_diagnostics(result.diagnostics)

    exit_code = 0
    for report in reports:
        print(f"[{report['path']}] {report['status']}")
        if args.print_diff and report["diff"]:
            print(report["diff"])
        if args.check and report["status"] == "drift":
            exit_code = 1
    return exit_code


def command_list(args: argparse.Namespace) -> int:
    config = resolve_config(args)
    diagnostics = Diagnostics()
    result = generate(build_context(config, diagnostics), diagnostics)
    print_diagnostics(result.diagnostics)

    if args.artifact:
        if args.artifact not in ARTIFACTS_BY_NAME:
            raise IccCodegenError(
                f"Unknown artifact '{args.artifact}'. Expected one of: {', '.join(ARTIFACTS_BY_NAME)}"
            )
        kinds = [ArtifactKind(args.artifact)]
    else:
        kinds = [kind for kind, table in result.tables.items() if len(table)]

    payload = {
        "namespace": result.context.namespace.as_dict(),
        "tables": {kind.value: result.tables[kind].as_dict() for kind in kinds},
    }
    print(json.dumps(payload, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icc-codegen",
        description="Generate the ICC C interface layers and linker export files from functions.txt.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    generate_cmd = sub.add_parser("generate", help="Render every artifact and write changed files.")
    add_input_arguments(generate_cmd)
    generate_cmd.add_argument("--output-root", help="Directory the icc/, iccpkg/ and icc_test/ trees live in.")
    generate_cmd.add_argument("--dry-run", action="store_true", help="Do not write files; only report status.")
    generate_cmd.add_argument("--check", action="store_true", help="Fail when generated artifacts drift from files on disk.")
    generate_cmd.add_argument("--print-diff", action="store_true", help="Print unified diff for changed artifacts.")
    generate_cmd.set_defaults(func=command_generate)

    list_cmd = sub.add_parser("list", help="Print the per-artifact symbol tables as JSON.")
    add_input_arguments(list_cmd)
    list_cmd.add_argument("--artifact", help="Only print the table of this artifact (for example icc_a.c).")
    list_cmd.set_defaults(func=command_list)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return int(args.func(args))
    except IccCodegenError as exc:
        print(f"icc_codegen error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
