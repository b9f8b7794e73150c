from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Iterator

from .common import Diagnostics, IccCodegenError
from .parser import FunctionDescriptor


@dataclass(frozen=True)
class SymbolTable:
    """Ordered (name, index) pairs of one artifact's members plus the enum type naming them."""

    artifact: str
    enum_name: str
    entries: tuple[tuple[str, int], ...]

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def index_of(self, name: str) -> int:
        for entry_name, index in self.entries:
            if entry_name == name:
                return index
        raise IccCodegenError(f"'{name}' is not in the {self.artifact} symbol table")

    def as_dict(self) -> dict[str, Any]:
        return {
            "artifact": self.artifact,
            "enum": self.enum_name,
            "count": len(self.entries),
            "functions": {name: index for name, index in self.entries},
        }


def build_symbol_table(
    artifact: str,
    enum_name: str,
    functions: Iterable[FunctionDescriptor],
) -> SymbolTable:
    return SymbolTable(
        artifact=artifact,
        enum_name=enum_name,
        entries=tuple((func.name, idx) for idx, func in enumerate(functions)),
    )


def argument_types_compatible(primary: str, legacy: str) -> bool:
    # Anything involving void is accepted, so 'char *' vs 'void *' passes.
    return primary == legacy or "void" in primary or "void" in legacy


@dataclass(frozen=True)
class FrozenRegistry:
    functions: tuple[FunctionDescriptor, ...]

    def __iter__(self) -> Iterator[FunctionDescriptor]:
        return iter(self.functions)

    def __len__(self) -> int:
        return len(self.functions)

    def get(self, name: str) -> FunctionDescriptor | None:
        for func in self.functions:
            if func.name == name:
                return func
        return None

    def members(self, letter: str) -> list[FunctionDescriptor]:
        return [func for func in self.functions if func.has_flag(letter)]


class FunctionRegistry:
    def __init__(self, functions: Iterable[FunctionDescriptor] = ()) -> None:
        self._functions: list[FunctionDescriptor] = list(functions)
        self._frozen = False

    def __iter__(self) -> Iterator[FunctionDescriptor]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def _require_open(self) -> None:
        if self._frozen:
            raise IccCodegenError("Function registry is frozen; it can no longer be modified")

    def add(self, func: FunctionDescriptor) -> None:
        self._require_open()
        self._functions.append(func)

    def index_of(self, name: str) -> int | None:
        for idx, func in enumerate(self._functions):
            if func.name == name:
                return idx
        return None

    def reconcile_legacy(self, legacy: Iterable[FunctionDescriptor], diagnostics: Diagnostics) -> int:
        """Flag registry entries whose signature also exists in the legacy input.

        Returns the number of entries flagged. Mismatches are reported, never fatal.
        """
        self._require_open()
        matched = 0
        for candidate in legacy:
            idx = self.index_of(candidate.name)
            if idx is None:
                diagnostics.warn(f"Couldn't match legacy {candidate.name}")
                continue

            current = self._functions[idx]
            if len(current.arguments) != len(candidate.arguments):
                diagnostics.warn(f"Different number of arguments {candidate.name}")
                diagnostics.warn(f"Couldn't match legacy {candidate.name}")
                continue

            mismatch = next(
                (
                    (ours.type, theirs.type)
                    for ours, theirs in zip(current.arguments, candidate.arguments)
                    if not argument_types_compatible(ours.type, theirs.type)
                ),
                None,
            )
            if mismatch is not None:
                diagnostics.warn(f"Argument type mismatch {candidate.name} {mismatch[0]} != {mismatch[1]}")
                continue

            self._functions[idx] = replace(current, legacy=True)
            matched += 1
        return matched

    def freeze(self) -> FrozenRegistry:
        self._frozen = True
        return FrozenRegistry(functions=tuple(self._functions))
