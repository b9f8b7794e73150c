from __future__ import annotations

from dataclasses import dataclass

from .common import Diagnostics
from .namespacing import namespace_comment
from .parser import CONTEXT_DOC_MARKER, FunctionDescriptor
from .registry import SymbolTable

API_CONTEXT_PARAM = "ICC_CTX *pcb"
LIB_CONTEXT_PARAM = "ICClib *pcb"
API_LINKAGE = "ICC_LINKAGE"

API_CONTEXT_DOC = " *  @param pcb ICC context pointer returned by a successful call to ICC_Init\n"
LIB_CONTEXT_DOC = (
    " *  @param pcb OpenSSL Library context pointer. This parameter is never exposed in public API's\n"
)
FIPS_CALLBACK_NOTE = (
    " *\n"
    " * @note this function supports the FIPS algorithm callback function\n"
    " * IF FIPS is enabled and the callback has been set in the ICC_CTX\n"
    " * a 1 will be returned by the callback prior to return for a FIPS algorithm properly configured,"
    " 0 otherwise\n"
)
LEGACY_WARNING_NOTE = " *  @note WARNING! This function is not implemented by all ICC contexts.\n"
LEGACY_NOTE = "/* This function exists in the older ICC version */\n"
RETURN_CODE_NAMES = ("ICC_OSSL_FAILURE", "ICC_OSSL_OK", "ICC_FAILURE", "ICC_NOT_IMPLEMENTED")

GENERATED_BANNER = "/* Machine generated code: DO NOT EDIT */"


@dataclass(frozen=True)
class ArtifactFlags:
    is_header: bool
    is_library: bool
    has_api_prefix: bool
    has_meta_prefix: bool
    requires_context: bool
    requires_lib_context: bool
    passes_context: bool
    passes_lib_context: bool
    namespaces_types: bool
    context_param: str


def api_artifact_flags(*, is_header: bool, namespaces_types: bool) -> ArtifactFlags:
    return ArtifactFlags(
        is_header=is_header,
        is_library=False,
        has_api_prefix=True,
        has_meta_prefix=False,
        requires_context=True,
        requires_lib_context=False,
        passes_context=False,
        passes_lib_context=True,
        namespaces_types=namespaces_types,
        context_param=API_CONTEXT_PARAM,
    )


def library_artifact_flags(*, is_header: bool, context_param: str = LIB_CONTEXT_PARAM) -> ArtifactFlags:
    return ArtifactFlags(
        is_header=is_header,
        is_library=True,
        has_api_prefix=False,
        has_meta_prefix=True,
        requires_context=False,
        requires_lib_context=True,
        passes_context=False,
        passes_lib_context=False,
        namespaces_types=False,
        context_param=context_param,
    )


@dataclass(frozen=True)
class CommentPolicy:
    cross_reference: bool = False
    fips_callback_note: bool = False
    namespace_types: bool = False
    context_doc: str = ""
    legacy_warnings: bool = False


def failure_value(return_type: str) -> str | None:
    if return_type == "void":
        return None
    if "*" in return_type:
        return "NULL"
    return f"({return_type})ICC_FAILURE"


def render_parameter_list(func: FunctionDescriptor, context_param: str = "") -> str:
    parts = [context_param] if context_param else []
    parts.extend(arg.render() for arg in func.parameters)
    return ",".join(parts) or "void"


def render_signature(func: FunctionDescriptor, prefix: str, context_param: str = "") -> str:
    linkage = f"{API_LINKAGE} " if context_param == API_CONTEXT_PARAM else ""
    return f"{func.return_type} {linkage}{prefix}{func.name}({render_parameter_list(func, context_param)})"


def typedef_passes_context(flags: ArtifactFlags, func: FunctionDescriptor) -> bool:
    return flags.passes_context or (flags.passes_lib_context and func.uses_lib_context)


def render_typedef(func: FunctionDescriptor, passes_context: bool) -> str:
    params = render_parameter_list(func, "void *pcb" if passes_context else "")
    return f"typedef {func.return_type} (*{func.typedef_name})({params});\n"


def render_call_arguments(func: FunctionDescriptor, context_expr: str = "") -> str:
    parts = [context_expr] if context_expr else []
    parts.extend(arg.name for arg in func.parameters)
    return ",".join(parts)


def render_return_temp(func: FunctionDescriptor) -> list[str]:
    value = failure_value(func.return_type)
    if value is None:
        return []
    return [f"\t{func.return_type} temp = {value};"]


def render_return(func: FunctionDescriptor) -> str:
    return "\treturn;" if func.returns_void else "\treturn temp;"


def call_context_expr(flags: ArtifactFlags, func: FunctionDescriptor) -> str:
    if flags.passes_lib_context and flags.requires_context and func.uses_lib_context:
        return "(void*)pcb->funcs"
    if (flags.passes_context and flags.requires_context) or (
        flags.passes_lib_context and flags.requires_lib_context
    ):
        return "(void*)pcb"
    return ""


def render_guarded_call(
    func: FunctionDescriptor,
    *,
    indent: str,
    context_expr: str,
    fips_check: bool = False,
    extra_code: list[str] | None = None,
) -> list[str]:
    condition = "NULL != tempf"
    if fips_check:
        condition += " && !((pcb->flags & ICC_FIPS_FLAG) && error_state)"
    assign = "" if func.returns_void else "temp = "
    lines = [
        f"{indent}if( {condition} ) {{",
        f"{indent}\t{assign}(tempf)({render_call_arguments(func, context_expr)});",
    ]
    lines.extend(extra_code or [])
    lines.append(f"{indent}}}")
    return lines


def warn_if_silent_failure(func: FunctionDescriptor, diagnostics: Diagnostics) -> None:
    if func.error_sensitive and func.returns_void:
        diagnostics.warn(
            f"{func.name}: this interface has a void return, "
            "marking it error sensitive will result in silent failures"
        )


def render_indirect_body(
    func: FunctionDescriptor,
    *,
    flags: ArtifactFlags,
    prefix: str,
    index: int,
    diagnostics: Diagnostics,
    extra_code: list[str] | None = None,
) -> str:
    """Public entry point forwarding through the context's function table slot `index`."""
    lines = [render_signature(func, prefix, flags.context_param), "{"]
    lines.extend(render_return_temp(func))

    guarded = flags.requires_context or (flags.requires_lib_context and func.uses_lib_context)
    indent = "\t"
    if guarded:
        lines.append("\t/* Note PCB is always checked for NULL in the calling function */")
        lines.append("\tif (NULL != pcb->funcs) {")
        indent = "\t\t"
    typedef = func.typedef_name
    lines.append(f"{indent}{typedef} tempf = ({typedef})(*(pcb->funcs))[{index}].func;")
    lines.extend(
        render_guarded_call(
            func,
            indent=indent,
            context_expr=call_context_expr(flags, func),
            # Only library-context bodies carry this guard. icclib_a.c currently
            # emits ef stubs only, so no artifact reaches it yet.
            fips_check=func.error_sensitive and flags.requires_lib_context and func.uses_lib_context,
            extra_code=extra_code,
        )
    )
    if guarded:
        lines.append("\t}")
    warn_if_silent_failure(func, diagnostics)
    lines.append(render_return(func))
    lines.append("}")
    return "\n".join(lines) + "\n\n"


def render_direct_access_function(func: FunctionDescriptor, index: int) -> str:
    """The 'ef' variant: same call through the static Global table, usable without any context."""
    lines = [
        "/*",
        " * This version of the previous function is used internally,",
        " * either during startup",
        " * or by an OpenSSL callback function when ICC contexts are",
        " * unavailable.",
        " */",
        f"{func.return_type} {func.direct_name}({render_parameter_list(func)})",
        "{",
    ]
    lines.extend(render_return_temp(func))
    typedef = func.typedef_name
    lines.append(f"\t{typedef} tempf = ({typedef})Global.funcs[{index}].func;")
    lines.extend(
        render_guarded_call(
            func,
            indent="\t",
            context_expr="NULL" if func.uses_lib_context else "",
        )
    )
    lines.append(render_return(func))
    lines.append("}")
    return "\n".join(lines) + "\n\n"


def extra_return_notes(func: FunctionDescriptor, legacy_warning: bool) -> str:
    if func.returns_void:
        return ""
    notes = ""
    if func.returns_pointer:
        if func.error_sensitive:
            notes += "\n *  NULL if a FIPS mode error occurred,"
        if legacy_warning:
            notes += "\n *  NULL if the API is not supported by an older ICC instance,"
    else:
        if func.error_sensitive:
            notes += "\n *  ICC_FAILURE if a FIPS mode error occurred,"
        if legacy_warning:
            notes += "\n *  ICC_NOT_IMPLEMENTED if not supported by an older ICC instance,"
    return notes


def append_return_code_reference(text: str) -> str:
    start = max(text.find("@return"), 0)
    if not any(text.find(code, start) > 0 for code in RETURN_CODE_NAMES):
        return text
    idx = text.rfind("\n")
    return text[:idx] + "\n *  @see ICC_RC_ENUM\n" + text[idx + 1 :]


def render_doc_comment(
    func: FunctionDescriptor,
    policy: CommentPolicy,
    *,
    context_in_signature: bool = True,
) -> str:
    if not func.comment:
        return ""

    text = "/*!\n" + func.comment
    if policy.cross_reference:
        text += f" *\n * <b>Indirect call to:</b> \\ref {func.name}()\n"
    if policy.fips_callback_note and func.fips_callback:
        text += FIPS_CALLBACK_NOTE
    if policy.namespace_types:
        text = namespace_comment(text)

    context_doc = policy.context_doc if context_in_signature else ""
    text = text.replace(CONTEXT_DOC_MARKER, context_doc, 1)

    legacy_warning = policy.legacy_warnings and not func.legacy
    if "@return" in text:
        text = text.replace("@return", "@return" + extra_return_notes(func, legacy_warning), 1)
    if legacy_warning:
        text += LEGACY_WARNING_NOTE
    text = append_return_code_reference(text)
    return text + "*/\n"


def render_legacy_note(func: FunctionDescriptor) -> str:
    return LEGACY_NOTE if func.legacy else ""


def render_enum(table: SymbolTable) -> str:
    lines = [
        "/*! @brief enum's for function table indices */",
        "/* Note: these are emitted after the numeric indices used above,",
        "   the table is only complete once every function has been read.",
        "*/",
        "typedef enum",
        "{",
    ]
    lines.extend(f"\tindexOf_{name} = {index}," for name, index in table.entries)
    lines.append("\tindexOf_TableEnd")
    lines.append(f"}} {table.enum_name};")
    return "\n".join(lines) + "\n"


def render_function_table(variable: str, size_macro: str, description: str, names: list[str]) -> str:
    lines = [
        "",
        "/*! @brief this is the default data structure",
        f"    that holds the call table for {description}",
        "*/",
        f"static FUNC {variable}[{size_macro}] =",
        "{",
    ]
    lines.extend(f'\t{{"{name}",NULL}},' for name in names)
    lines.append("};")
    return "\n".join(lines) + "\n"


def render_generated_preamble(license_header: str) -> str:
    return f"\n{license_header}{GENERATED_BANNER}\n\n"


def render_generated_postamble() -> str:
    return f"\n{GENERATED_BANNER}\n"
