from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema

from .common import IccCodegenError, load_json

API_TYPE_PREFIX = "ICC_"
DEFAULT_VERSION = "0_0_0"
DEFAULT_VERSION_FILE = "ICC_ver.txt"
DEFAULT_FUNCTIONS_FILE = "functions.txt"
DEFAULT_EXPORT_EXCLUSIONS = ("OS_helpers",)
DEFAULT_LICENSE_HEADER = (
    "/*-----------------------------------------------------------------\n"
    "// Licensed under the Apache License 2.0 (the \"License\"). You may not use\n"
    "// this file except in compliance with the License. You can obtain a copy\n"
    "// in the file LICENSE in the source distribution.\n"
    "//----------------------------------------------------------------*/\n\n\n"
)

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "config.schema.json"


@dataclass(frozen=True)
class NamespaceConfig:
    """Symbol prefixes derived from the PREFIX= / OPENSSLPREFIX= directives of one input."""

    prefix: str = ""
    openssl_prefix: str = ""

    @property
    def api_prefix(self) -> str:
        return f"ICC{self.prefix}_"

    @property
    def meta_prefix(self) -> str:
        if not self.prefix:
            return ""
        return f"{self.prefix}{self.prefix}_"

    @property
    def is_namespaced(self) -> bool:
        return self.api_prefix != API_TYPE_PREFIX

    @property
    def is_fips(self) -> bool:
        return "C" in self.prefix

    @property
    def lib_init_prefix(self) -> str:
        return "C_" if self.is_fips else "N_"

    def as_dict(self) -> dict[str, str]:
        return {
            "prefix": self.prefix,
            "api_prefix": self.api_prefix,
            "meta_prefix": self.meta_prefix,
            "openssl_prefix": self.openssl_prefix,
        }


@dataclass(frozen=True)
class OutputLayout:
    icc_dir: str = "icc"
    iccpkg_dir: str = "iccpkg"
    icc_test_dir: str = "icc_test"


@dataclass(frozen=True)
class GeneratorConfig:
    functions_path: Path
    legacy_path: Path | None = None
    version_file: Path = Path(DEFAULT_VERSION_FILE)
    output_root: Path = Path(".")
    layout: OutputLayout = field(default_factory=OutputLayout)
    license_header: str = DEFAULT_LICENSE_HEADER
    export_exclusions: tuple[str, ...] = DEFAULT_EXPORT_EXCLUSIONS
    platforms: tuple[str, ...] | None = None


def validate_config_payload(payload: dict[str, Any]) -> None:
    schema = load_json(SCHEMA_PATH)
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        raise IccCodegenError(f"config failed JSON schema validation: {exc.message}") from exc


def _resolve(base_dir: Path, value: str) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    return base_dir / path


def build_generator_config(payload: dict[str, Any], base_dir: Path) -> GeneratorConfig:
    validate_config_payload(payload)

    layout_payload = payload.get("layout") or {}
    layout = OutputLayout(
        icc_dir=str(layout_payload.get("icc_dir", "icc")),
        iccpkg_dir=str(layout_payload.get("iccpkg_dir", "iccpkg")),
        icc_test_dir=str(layout_payload.get("icc_test_dir", "icc_test")),
    )

    legacy = payload.get("legacy_functions")
    platforms = payload.get("platforms")
    return GeneratorConfig(
        functions_path=_resolve(base_dir, str(payload.get("functions", DEFAULT_FUNCTIONS_FILE))),
        legacy_path=_resolve(base_dir, str(legacy)) if legacy else None,
        version_file=_resolve(base_dir, str(payload.get("version_file", DEFAULT_VERSION_FILE))),
        output_root=_resolve(base_dir, str(payload.get("output_root", "."))),
        layout=layout,
        license_header=str(payload.get("license_header", DEFAULT_LICENSE_HEADER)),
        export_exclusions=tuple(payload.get("export_exclusions", DEFAULT_EXPORT_EXCLUSIONS)),
        platforms=tuple(platforms) if platforms is not None else None,
    )


def load_config(path: Path) -> GeneratorConfig:
    payload = load_json(path)
    return build_generator_config(payload, path.resolve().parent)


def read_version(path: Path) -> str:
    """First line of the version file, or the placeholder version when it is missing or empty."""
    if not path.exists():
        return DEFAULT_VERSION
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise IccCodegenError(f"Unable to read version file '{path}': {exc}") from exc
    if not lines or not lines[0].strip():
        return DEFAULT_VERSION
    return lines[0].strip()
