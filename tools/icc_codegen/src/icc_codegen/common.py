from __future__ import annotations

import difflib
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator


class IccCodegenError(Exception):
    pass


class ParseError(IccCodegenError):
    def __init__(self, message: str, *, source: str = "", record: str = "") -> None:
        self.source = source
        self.record = record
        location = f"{source}: " if source else ""
        detail = f" in '{record}'" if record else ""
        super().__init__(f"{location}{message}{detail}")


@dataclass(frozen=True)
class Diagnostic:
    severity: str
    message: str

    def render(self) -> str:
        return f"icc_codegen {self.severity}: {self.message}"


@dataclass
class Diagnostics:
    """Recoverable findings gathered during a run; the CLI prints them."""

    items: list[Diagnostic] = field(default_factory=list)

    def warn(self, message: str) -> None:
        # Several artifacts render the same descriptor; report each finding once.
        diagnostic = Diagnostic(severity="warning", message=message)
        if diagnostic not in self.items:
            self.items.append(diagnostic)

    def messages(self) -> list[str]:
        return [item.message for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)


def load_json(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise IccCodegenError(f"Unable to read JSON file '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise IccCodegenError(f"Invalid JSON in '{path}': {exc}") from exc
    if not isinstance(payload, dict):
        raise IccCodegenError(f"JSON root in '{path}' must be an object")
    return payload


def read_source_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise IccCodegenError(f"Unable to read file '{path}': {exc}") from exc


def artifact_status(path: Path, content: str, *, dry_run: bool, check: bool) -> tuple[str, str]:
    """Compare rendered content with the file on disk; nothing is written here."""
    old_content = read_source_text(path) if path.is_file() else ""
    if old_content == content:
        return "unchanged", ""
    diff = "\n".join(
        difflib.unified_diff(
            old_content.splitlines(),
            content.splitlines(),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
            lineterm="",
        )
    )
    if check:
        return "drift", diff
    if dry_run:
        return "would_write", diff
    return "updated", diff


def write_all_or_nothing(files: list[tuple[Path, str]]) -> None:
    """Stage every file as a hidden sibling, then move them into place.

    A failure while staging removes the staged copies and leaves every target untouched.
    """
    staged: list[tuple[Path, Path]] = []
    try:
        for path, content in files:
            temp = path.with_name(f".{path.name}.tmp")
            staged.append((temp, path))
            path.parent.mkdir(parents=True, exist_ok=True)
            temp.write_text(content, encoding="utf-8", newline="\n")
    except OSError as exc:
        for temp, _ in staged:
            if temp.exists():
                temp.unlink()
        raise IccCodegenError(f"Unable to write generated files, nothing was changed: {exc}") from exc

    for temp, path in staged:
        try:
            os.replace(temp, path)
        except OSError as exc:
            raise IccCodegenError(f"Unable to move '{temp}' to '{path}': {exc}") from exc
