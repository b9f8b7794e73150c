from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from .common import ParseError
from .config import NamespaceConfig

RECORD_TERMINATOR = ";"
PREFIX_DIRECTIVE = "PREFIX="
OPENSSL_PREFIX_DIRECTIVE = "OPENSSLPREFIX="
DOC_COMMENT_LEAD = "#!"
# Placeholder left in buffered doc text where the implicit context parameter is documented.
CONTEXT_DOC_MARKER = "%PCB%"
VOID_PARAMETER = "void"

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class Argument:
    base_type: str
    declarator: str

    @property
    def is_void(self) -> bool:
        return not self.base_type and self.declarator == VOID_PARAMETER

    @property
    def name(self) -> str:
        """Bare identifier used when forwarding the argument to another call."""
        match = _IDENTIFIER_RE.search(self.declarator)
        if match is None:
            return self.declarator
        return match.group(0)

    @property
    def type(self) -> str:
        match = _IDENTIFIER_RE.search(self.declarator)
        if match is None:
            return self.base_type
        rest = (self.declarator[: match.start()] + self.declarator[match.end() :]).strip()
        if not rest:
            return self.base_type
        return f"{self.base_type} {rest}".strip()

    def render(self) -> str:
        if not self.base_type:
            return self.declarator
        return f"{self.base_type} {self.declarator}"


VOID_ARGUMENT = Argument(base_type="", declarator=VOID_PARAMETER)


@dataclass(frozen=True)
class FunctionDescriptor:
    name: str
    return_type: str
    arguments: tuple[Argument, ...]
    modifiers: str
    comment: str = ""
    legacy: bool = False

    @property
    def api_level(self) -> int:
        return int(self.modifiers[0])

    @property
    def flags(self) -> frozenset[str]:
        return frozenset(self.modifiers[1:])

    def has_flag(self, letter: str) -> bool:
        return letter in self.modifiers[1:]

    @property
    def error_sensitive(self) -> bool:
        return self.has_flag("E")

    @property
    def macro_function(self) -> bool:
        return self.has_flag("F")

    @property
    def uses_lib_context(self) -> bool:
        return self.has_flag("P")

    @property
    def redirect(self) -> bool:
        return self.has_flag("M")

    @property
    def java_only(self) -> bool:
        return self.has_flag("J")

    @property
    def fips_callback(self) -> bool:
        return self.has_flag("C")

    @property
    def typedef_name(self) -> str:
        return f"fptr_{self.name}"

    @property
    def direct_name(self) -> str:
        return f"ef{self.name}"

    @property
    def returns_void(self) -> bool:
        return self.return_type == "void"

    @property
    def returns_pointer(self) -> bool:
        return "*" in self.return_type

    @property
    def parameters(self) -> tuple[Argument, ...]:
        """Arguments without the void sentinel."""
        return tuple(arg for arg in self.arguments if not arg.is_void)

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "return_type": self.return_type,
            "arguments": [{"type": arg.type, "name": arg.name} for arg in self.parameters],
            "api_level": self.api_level,
            "flags": "".join(sorted(self.flags)),
            "legacy": self.legacy,
        }


@dataclass(frozen=True)
class ParsedInput:
    source: str
    namespace: NamespaceConfig
    functions: tuple[FunctionDescriptor, ...]


def split_records(text: str) -> tuple[list[str], str]:
    """Split input into trimmed ';'-terminated records plus the unterminated tail."""
    parts = text.split(RECORD_TERMINATOR)
    return [part.strip() for part in parts[:-1]], parts[-1].strip()


def split_arguments(text: str) -> tuple[list[str], str]:
    """Split the text following a declaration's opening '(' at top-level commas.

    Returns the argument chunks and whatever trails the closing ')'.
    """
    chunks: list[str] = []
    token: list[str] = []
    depth = 1

    for idx, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                chunks.append("".join(token).strip())
                return chunks, text[idx + 1 :]
        elif ch == "," and depth == 1:
            chunks.append("".join(token).strip())
            token = []
            continue
        token.append(ch)

    raise ParseError("Mismatched parenthesis in argument list", record=text.strip())


def group_balanced_tokens(tokens: list[str]) -> list[str]:
    groups: list[str] = []
    current: list[str] = []
    depth = 0
    for token in tokens:
        current.append(token)
        depth += token.count("(") - token.count(")")
        if depth <= 0:
            groups.append(" ".join(current))
            current = []
            depth = 0
    if current:
        groups.append(" ".join(current))
    return groups


def parse_argument(chunk: str) -> Argument:
    tokens = chunk.split()
    if not tokens or tokens == [VOID_PARAMETER]:
        return VOID_ARGUMENT
    groups = group_balanced_tokens(tokens)
    return Argument(base_type=" ".join(groups[:-1]), declarator=groups[-1])


def parse_arguments(text: str) -> tuple[Argument, ...]:
    chunks, _ = split_arguments(text)
    if len(chunks) == 1:
        return (parse_argument(chunks[0]),)
    if any(not chunk for chunk in chunks):
        raise ParseError("Empty argument in parameter list", record=text.strip())
    arguments = tuple(parse_argument(chunk) for chunk in chunks)
    if any(arg.is_void for arg in arguments):
        raise ParseError("'void' must be the only parameter", record=text.strip())
    return arguments


def parse_declaration(record: str, comment: str = "") -> FunctionDescriptor:
    parts = record.split(None, 1)
    if len(parts) != 2:
        raise ParseError("Declaration is missing its signature", record=record)
    modifiers, body = parts

    open_idx = body.find("(")
    if open_idx < 0:
        raise ParseError("Declaration has no parameter list", record=record)

    head = body[:open_idx].split()
    if len(head) < 2:
        raise ParseError("Declaration needs a return type and a name", record=record)

    name = head[-1]
    return_type = " ".join(head[:-1])
    while name.startswith("*"):
        name = name[1:]
        return_type += " *"
    if not name:
        raise ParseError("Declaration has an empty function name", record=record)

    try:
        arguments = parse_arguments(body[open_idx + 1 :])
    except ParseError as exc:
        raise ParseError(f"Mismatched parenthesis or malformed arguments for '{name}'", record=record) from exc

    return FunctionDescriptor(
        name=name,
        return_type=return_type,
        arguments=arguments,
        modifiers=modifiers,
        comment=comment,
    )


@dataclass
class DeclarationParser:
    """Stateful reader for one functions.txt style input."""

    source: str = "functions.txt"
    prefix: str = ""
    openssl_prefix: str = ""
    pending_comment: str = ""
    functions: list[FunctionDescriptor] = field(default_factory=list)

    def handle_comment(self, record: str) -> None:
        if len(record) > 2 and record.startswith(DOC_COMMENT_LEAD):
            line = record[2:]
            if (
                "@brief" in self.pending_comment
                and "@param" in line
                and "@param" not in self.pending_comment
            ):
                self.pending_comment += CONTEXT_DOC_MARKER
            self.pending_comment += f" * {line}\n"
        else:
            self.pending_comment = ""

    def handle_record(self, record: str) -> FunctionDescriptor | None:
        if record.startswith(PREFIX_DIRECTIVE):
            self.prefix = record[len(PREFIX_DIRECTIVE) :]
            return None
        if record.startswith(OPENSSL_PREFIX_DIRECTIVE):
            self.openssl_prefix = record[len(OPENSSL_PREFIX_DIRECTIVE) :]
            return None
        if record.startswith("#"):
            self.handle_comment(record)
            return None
        if not record or not record[0].isdigit():
            return None

        try:
            descriptor = parse_declaration(record, self.pending_comment)
        except ParseError as exc:
            raise ParseError(str(exc), source=self.source) from exc
        self.pending_comment = ""
        self.functions.append(descriptor)
        return descriptor

    def parse_text(self, text: str) -> ParsedInput:
        records, tail = split_records(text)
        if not records:
            raise ParseError(f"Reached end of {self.source} unexpectedly")

        for record in records:
            self.handle_record(record)
        if tail and tail[0].isdigit():
            raise ParseError("Unexpected end of input inside a declaration", source=self.source, record=tail)

        return ParsedInput(
            source=self.source,
            namespace=NamespaceConfig(prefix=self.prefix, openssl_prefix=self.openssl_prefix),
            functions=tuple(self.functions),
        )


def parse_functions_text(text: str, source: str = "functions.txt") -> ParsedInput:
    return DeclarationParser(source=source).parse_text(text)
