from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .config import (
    DEFAULT_EXPORT_EXCLUSIONS,
    DEFAULT_LICENSE_HEADER,
    DEFAULT_VERSION,
    NamespaceConfig,
    OutputLayout,
)
from .registry import FrozenRegistry


@dataclass(frozen=True)
class GenerationContext:
    """Everything an artifact may read; built once after parsing and never mutated."""

    registry: FrozenRegistry
    namespace: NamespaceConfig = field(default_factory=NamespaceConfig)
    legacy_namespace: NamespaceConfig = field(default_factory=NamespaceConfig)
    has_legacy_input: bool = False
    version: str = DEFAULT_VERSION
    license_header: str = DEFAULT_LICENSE_HEADER
    export_exclusions: tuple[str, ...] = DEFAULT_EXPORT_EXCLUSIONS
    platforms: tuple[str, ...] | None = None
    layout: OutputLayout = field(default_factory=OutputLayout)


@dataclass(frozen=True)
class GeneratedFile:
    relative_path: Path
    content: str
    artifact: str
