from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .artifacts import ARTIFACT_ORDER, ArtifactEmitter, ArtifactKind
from .common import Diagnostics, artifact_status, read_source_text, write_all_or_nothing
from .config import GeneratorConfig, NamespaceConfig, read_version
from .context import GeneratedFile, GenerationContext
from .exports import Platform, build_export_families, render_export_family
from .parser import parse_functions_text
from .registry import FrozenRegistry, FunctionRegistry, SymbolTable


@dataclass
class GenerationResult:
    context: GenerationContext
    files: list[GeneratedFile] = field(default_factory=list)
    tables: dict[ArtifactKind, SymbolTable] = field(default_factory=dict)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def content_of(self, relative_path: str | Path) -> str:
        wanted = Path(relative_path)
        for generated in self.files:
            if generated.relative_path == wanted:
                return generated.content
        raise KeyError(str(relative_path))


def parse_inputs(
    functions_text: str,
    *,
    legacy_text: str | None = None,
    functions_source: str = "functions.txt",
    legacy_source: str = "legacy functions.txt",
    diagnostics: Diagnostics,
) -> tuple[FrozenRegistry, NamespaceConfig, NamespaceConfig]:
    primary = parse_functions_text(functions_text, functions_source)
    registry = FunctionRegistry(primary.functions)

    legacy_namespace = NamespaceConfig()
    if legacy_text is not None:
        legacy = parse_functions_text(legacy_text, legacy_source)
        registry.reconcile_legacy(legacy.functions, diagnostics)
        legacy_namespace = legacy.namespace

    return registry.freeze(), primary.namespace, legacy_namespace


def build_context(config: GeneratorConfig, diagnostics: Diagnostics) -> GenerationContext:
    functions_text = read_source_text(config.functions_path)
    legacy_text = read_source_text(config.legacy_path) if config.legacy_path is not None else None
    registry, namespace, legacy_namespace = parse_inputs(
        functions_text,
        legacy_text=legacy_text,
        functions_source=str(config.functions_path),
        legacy_source=str(config.legacy_path),
        diagnostics=diagnostics,
    )
    return GenerationContext(
        registry=registry,
        namespace=namespace,
        legacy_namespace=legacy_namespace,
        has_legacy_input=legacy_text is not None,
        version=read_version(config.version_file),
        license_header=config.license_header,
        export_exclusions=config.export_exclusions,
        platforms=config.platforms,
        layout=config.layout,
    )


def run_artifact(emitter: ArtifactEmitter) -> str:
    members = emitter.select_members()
    emitter.collect(members)
    emitter.preamble()
    for index, func in enumerate(members):
        emitter.body(func, index)
    emitter.postamble()
    return emitter.cleanup()


def generate(context: GenerationContext, diagnostics: Diagnostics | None = None) -> GenerationResult:
    """Render every artifact in dependency order; nothing touches the filesystem here."""
    result = GenerationResult(context=context, diagnostics=diagnostics or Diagnostics())
    families = build_export_families(context.namespace)
    platforms = [Platform(name) for name in context.platforms] if context.platforms is not None else None

    for artifact_cls in ARTIFACT_ORDER:
        emitter = artifact_cls(context, result.tables, result.diagnostics)
        content = run_artifact(emitter)
        result.tables[emitter.kind] = emitter.table

        directory = Path(getattr(context.layout, emitter.layout_dir))
        result.files.append(GeneratedFile(directory / emitter.file_name, content, emitter.file_name))

        for family_name in emitter.export_families:
            family = families[family_name]
            export_dir = Path(getattr(context.layout, family.layout_dir)) / family.subdirectory
            rendered = render_export_family(
                family,
                emitter.table.names,
                exclusions=context.export_exclusions,
                version=context.version,
                platforms=platforms,
            )
            for file_name, text in rendered:
                result.files.append(GeneratedFile(export_dir / file_name, text, f"{emitter.file_name}:{family.name}"))

    return result


def write_outputs(
    result: GenerationResult,
    output_root: Path,
    *,
    check: bool = False,
    dry_run: bool = False,
) -> list[dict[str, Any]]:
    reports: list[dict[str, Any]] = []
    pending: list[tuple[Path, str]] = []
    for generated in result.files:
        path = output_root / generated.relative_path
        status, diff = artifact_status(path, generated.content, dry_run=dry_run, check=check)
        if status == "updated":
            pending.append((path, generated.content))
        reports.append(
            {
                "path": str(generated.relative_path),
                "artifact": generated.artifact,
                "status": status,
                "diff": diff,
            }
        )
    write_all_or_nothing(pending)
    return reports


def run_generation(
    config: GeneratorConfig,
    *,
    check: bool = False,
    dry_run: bool = False,
) -> tuple[GenerationResult, list[dict[str, Any]]]:
    diagnostics = Diagnostics()
    context = build_context(config, diagnostics)
    result = generate(context, diagnostics)
    reports = write_outputs(result, config.output_root, check=check, dry_run=dry_run)
    return result, reports
