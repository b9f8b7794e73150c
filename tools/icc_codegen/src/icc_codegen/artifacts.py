from __future__ import annotations

from enum import Enum
from typing import ClassVar, Mapping

from .common import Diagnostics, IccCodegenError
from .config import NamespaceConfig
from .context import GenerationContext
from .namespacing import expand_prefix_template, namespace_descriptor
from .parser import FunctionDescriptor
from .registry import SymbolTable, build_symbol_table
from .rendering import (
    API_CONTEXT_DOC,
    API_CONTEXT_PARAM,
    LIB_CONTEXT_DOC,
    LIB_CONTEXT_PARAM,
    ArtifactFlags,
    CommentPolicy,
    api_artifact_flags,
    call_context_expr,
    failure_value,
    library_artifact_flags,
    render_call_arguments,
    render_direct_access_function,
    render_doc_comment,
    render_enum,
    render_function_table,
    render_generated_postamble,
    render_generated_preamble,
    render_guarded_call,
    render_indirect_body,
    render_legacy_note,
    render_return,
    render_return_temp,
    render_signature,
    render_typedef,
    typedef_passes_context,
    warn_if_silent_failure,
)


class ArtifactKind(str, Enum):
    ICC_A_C = "icc_a.c"
    ICC_A_H = "icc_a.h"
    ICCLIB_A_C = "icclib_a.c"
    ICCLIB_A_H = "icclib_a.h"
    ICCPKG_A_C = "iccpkg_a.c"
    ICCPKG_A_H = "iccpkg_a.h"
    GSK_WRAP2_A_C = "gsk_wrap2_a.c"
    MUPPET_MK = "muppet.mk"
    ONE_SH = "one.sh"
    ICC_AUX_A_C = "icc_aux_a.c"
    ICC_AUX_A_H = "icc_aux_a.h"
    JCC_A_H = "jcc_a.h"


API_TYPE_PREFIX = "ICC_"

# ICC_Init/ICC_InitW are hand written but still need namespacing in the public header.
INIT_DECLARATION_TEMPLATES = (
    "#define ICC_Init ICC@Prefix@_Init\n",
    "/*! @brief Obtain an ICC context\n"
    " *  @param status a pointer to previously allocated ICC_STATUS structure\n"
    " *  @param iccpath a string containing the root path to the ICC shared libraries\n"
    " *  @note  ICC internally adds icc/icclib/[icc libname] icc/osslib/[openssl libname]\n"
    " *  to the iccpath provided to locate the actual libraries\n"
    " *  @return An ICC_CTX pointer or NULL on failure\n"
    " */\n",
    "ICC_CTX * ICC_LINKAGE ICC@Prefix@_Init(ICC_STATUS* status,const char* iccpath);\n\n",
    "#if defined(_WIN32)\n"
    "/* Should only be needed on Windows ... Unicode version of ICC_Init */\n",
    "#define ICC_InitW ICC@Prefix@_InitW\n",
    "/*! @brief Obtain an ICC context\n"
    " *  @param status a pointer to previously allocated ICC_STATUS structure\n"
    " *  @param iccpath a UNICODE string containing the root path to the ICC shared libraries\n"
    " *  @note  ICC internally adds icc/icclib/[icc libname] icc/osslib/[openssl libname]\n"
    " *  to the iccpath provided to locate the actual libraries\n"
    " *  @return An ICC_CTX pointer or NULL on failure\n"
    " */\n",
    "ICC_CTX * ICC_LINKAGE ICC@Prefix@_InitW(ICC_STATUS* status,const wchar_t* iccpath);\n",
    "#endif\n",
)

PRIVATE_DEFINE_TEMPLATES = (
    "#define ICC_lib_cleanup ICC@Prefix@_lib_cleanup",
    "#define META_CRYPTO_mem_ctrl META@Prefix@_CRYPTO_mem_ctrl",
)

PATH_HELPER_DECLARATIONS = (
    "\n"
    "/*! @brief Find the full path to ICC needed to give to the ICC_Init call\n"
    " *  @param return_path input buffer to contain the returned path\n"
    " *  @param path_len max length to copying into return_path\n"
    " *  @return The path length on success,0 on failure, -1 on a parameter error\n"
    " */\n"
    "int ICC_LINKAGE gskiccs_path(char *return_path, int path_len);\n\n"
    "\n"
    "#if defined(_WIN32)\n"
    "/*! @brief Find the full path to ICC needed to give to the ICC_InitW call\n"
    " *  @param return_path input buffer to contain the returned path\n"
    " *  @param path_len max length to copying into return_path\n"
    " *  @return The path length on success,0 on failure, -1 on a parameter error\n"
    " */\n"
    "int ICC_LINKAGE gskiccs_pathW(wchar_t *return_path, int path_len);\n\n"
    "#endif\n"
    "\n"
)

ICCLIB_STRUCTURES = (
    "\n/*! @brief The definition of the global static library hook part of ICClib\n"
    "             Only one instance exists which is populated only once, by the first\n"
    "             ICC_Attach() call which loads and validates ICC and OpenSSL libraries\n"
    "\n*/\n"
    "\nstruct ICClibGlobal_t\n{\n"
    "\tchar ID[4];                          /*!< set to ICC */\n"
    "\tchar version[20];                    /*!< set to the ICC version i.e. 1.2 */\n"
    "\tchar iccpath[MAX_PATH*4];            /*!< set to the ICC path we loaded ICC from and large"
    " enough to hold uc32 strings */\n"
    "\tvoid *hOSSLib;                       /*!< handle of OpenSSL library (from dlopen()) */\n"
    "\tFUNC funcs[NUM_ICCLIBFUNCTIONS];     /*!< An array of them, one for each function */\n"
    "\tint unicode;                         /*!< Unicode init path (iccpath) */\n"
    "\tint initialized;                     /*!< Initialized, POST, integrity checks completed */\n"
    "\tICC_STATUS status;                   /*!< Global status, POST errors during library load"
    " are preserved here */\n"
    "\tICC_Mutex mtx;                       /*!< Global mutex */\n"
    "};\n\n\n"
    "/*! @brief ICClib_t is used to hold the per-instance ICC context info.\n"
    "           This information is opaque to ICC users\n"
    "*/\n"
    "\nstruct ICClib_t\n{\n"
    "\tFUNC *funcs;\n"
    "\tint length;                          /*!< sizeof ICClib_t (myself) */\n"
    "\tchar pIDinit[8];                     /*!< Process ID at ICC_Init */\n"
    "\tchar tIDinit[8];                     /*!< Thread ID at ICC_Init */\n"
    "\tchar toi[8];                         /*!< creation time i.e. time() */\n"
    "\tchar pIDattach[8];                   /*!< Process ID at ICC_Attach */\n"
    "\tchar tIDattach[8];                   /*!< Thread ID at ICC_Attach */\n"
    "\tchar toa[8];                         /*!< attach time. i.e. time() */\n"
    "\tint flags;                           /*!< mode flags. FIPS, ERROR etc*/\n"
    "\tint lock;                            /*!< Set once initialized to prevent invalid mode changes*/\n"
    "\tint unicode;                         /*!< Initialized with a unicode string */\n"
    "\tCALLBACK_T callback;                 /*!< Callback for fips indicator*/\n"
    "};\n\n"
    "typedef struct ICClib_t ICClib;\n\n"
)

# Wrapper entry points implemented by hand in gsk_wrap2.c.
HAND_WRITTEN_WRAPPERS = ("Init", "InitW", "SetValue", "Attach", "Cleanup")
STATUS_PREFILL_FUNCTIONS = ("GetValue", "GetStatus")
JAVA_ALIASED_FUNCTIONS = (
    "Init",
    "GenerateRandomSeed",
    "GetValue",
    "HKDF",
    "HKDF_Expand",
    "HKDF_Extract",
    "MemCheck_start",
    "MemCheck_stop",
)


def render_init_declarations(prefix: str, *, with_defines: bool) -> str:
    parts = [
        expand_prefix_template(prefix, template) + "\n"
        for template in INIT_DECLARATION_TEMPLATES
        if with_defines or "#define" not in template
    ]
    if with_defines:
        parts.append("/* End namespacing of public API functions */\n")
    return "".join(parts)


def render_lib_init_defines(namespace: NamespaceConfig) -> str:
    non_fips = 0 if namespace.is_fips else 1
    return f"#define lib_init {namespace.lib_init_prefix}lib_init\n#define NON_FIPS_ICC {non_fips}\n"


class ArtifactEmitter:
    """One generated file, driven through preamble, body per member, postamble and cleanup."""

    kind: ClassVar[ArtifactKind]
    layout_dir: ClassVar[str] = "icc_dir"
    membership: ClassVar[str | None] = None
    flags: ClassVar[ArtifactFlags] = api_artifact_flags(is_header=False, namespaces_types=False)
    comment_policy: ClassVar[CommentPolicy] = CommentPolicy()
    enum_name: ClassVar[str] = ""
    export_families: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        context: GenerationContext,
        tables: Mapping[ArtifactKind, SymbolTable] | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        self.context = context
        self.tables = tables if tables is not None else {}
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.table = SymbolTable(artifact=self.file_name, enum_name=self.enum_name, entries=())
        self._chunks: list[str] = []
        self._phase = "new"

    @property
    def file_name(self) -> str:
        return self.kind.value

    @property
    def namespace(self) -> NamespaceConfig:
        return self.context.namespace

    def select_members(self) -> list[FunctionDescriptor]:
        if self.membership is None:
            return []
        members = self.context.registry.members(self.membership)
        if self.flags.namespaces_types:
            members = [namespace_descriptor(func) for func in members]
        return members

    def collect(self, members: list[FunctionDescriptor]) -> SymbolTable:
        self.table = build_symbol_table(self.file_name, self.enum_name, members)
        return self.table

    def require_table(self, kind: ArtifactKind) -> SymbolTable:
        table = self.tables.get(kind)
        if table is None:
            raise IccCodegenError(
                f"{self.file_name} needs the {kind.value} symbol table, which has not been generated yet"
            )
        return table

    def write(self, text: str) -> None:
        self._chunks.append(text)

    def _advance(self, phase: str, allowed: tuple[str, ...]) -> None:
        if self._phase not in allowed:
            raise IccCodegenError(f"{self.file_name}: {phase} cannot follow {self._phase}")
        self._phase = phase

    def preamble(self) -> None:
        self._advance("preamble", ("new",))
        self.render_preamble()

    def body(self, func: FunctionDescriptor, index: int) -> None:
        self._advance("body", ("preamble", "body"))
        self.render_body(func, index)

    def postamble(self) -> None:
        self._advance("postamble", ("preamble", "body"))
        self.render_postamble()

    def cleanup(self) -> str:
        self._advance("closed", ("postamble",))
        return "".join(self._chunks)

    def render_preamble(self) -> None:
        self.write(render_generated_preamble(self.context.license_header))

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        pass

    def render_postamble(self) -> None:
        self.write(render_generated_postamble())

    def extra_code_in_function(self, func: FunctionDescriptor) -> list[str]:
        return []

    def extra_function(self, func: FunctionDescriptor, index: int) -> str:
        return ""

    def doc_comment(self, func: FunctionDescriptor, *, context_in_signature: bool = True) -> str:
        return render_doc_comment(func, self.comment_policy, context_in_signature=context_in_signature)

    def prototype(self, func: FunctionDescriptor, prefix: str, context_param: str) -> str:
        return (
            render_legacy_note(func)
            + self.doc_comment(func, context_in_signature=bool(context_param))
            + render_signature(func, prefix, context_param)
            + ";\n\n"
        )

    def indirect_function(self, func: FunctionDescriptor, index: int, prefix: str) -> str:
        return (
            render_typedef(func, typedef_passes_context(self.flags, func))
            + self.doc_comment(func)
            + render_indirect_body(
                func,
                flags=self.flags,
                prefix=prefix,
                index=index,
                diagnostics=self.diagnostics,
                extra_code=self.extra_code_in_function(func),
            )
            + self.extra_function(func, index)
        )


class IccSource(ArtifactEmitter):
    kind = ArtifactKind.ICC_A_C
    membership = "a"
    flags = api_artifact_flags(is_header=False, namespaces_types=True)
    comment_policy = CommentPolicy(cross_reference=True, fips_callback_note=True, context_doc=API_CONTEXT_DOC)
    enum_name = "ICC_FUNCTION_ENUM"

    def render_preamble(self) -> None:
        self.write("\n#if defined(ICC)\n")
        super().render_preamble()

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        # ICC_SetValue is hand written; only its call table type is generated.
        if func.name == "SetValue":
            self.write(render_typedef(func, typedef_passes_context(self.flags, func)))
            return
        self.write(self.indirect_function(func, index, self.namespace.api_prefix))

    def render_postamble(self) -> None:
        self.write("\n#endif /* defined(ICC) */\n")
        self.write(render_enum(self.table))
        super().render_postamble()


class IccHeader(ArtifactEmitter):
    kind = ArtifactKind.ICC_A_H
    membership = "b"
    flags = api_artifact_flags(is_header=True, namespaces_types=True)
    comment_policy = CommentPolicy(cross_reference=True, fips_callback_note=True, context_doc=API_CONTEXT_DOC)

    def render_preamble(self) -> None:
        api_table = self.require_table(ArtifactKind.ICC_A_C)
        super().render_preamble()
        self.write(
            "/** \\file icc_a.h\n"
            "* Function prototypes for the ICC API (ICCSDK).\n"
            "* This file is autogenerated and should only be included via icc.h.\n"
            "*/\n\n"
        )
        self.write(f"\n#define NUM_ICCFUNCTIONS {len(api_table)}\n\n")
        self.write("#if !defined(ICCLIB)\n")

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        if func.java_only:
            return
        target = f"{self.namespace.api_prefix}{func.name}"
        self.write(f"/*! \\sa {target} */\n#define ICC_{func.name} {target}\n")
        self.write(self.prototype(func, self.namespace.api_prefix, API_CONTEXT_PARAM))

    def render_postamble(self) -> None:
        if self.namespace.prefix:
            self.write(render_init_declarations(self.namespace.prefix, with_defines=True))
        if self.namespace.is_namespaced:
            self.write("/* Non-public API functions, do not access via user code */\n")
            for template in PRIVATE_DEFINE_TEMPLATES:
                self.write(expand_prefix_template(self.namespace.prefix, template) + "\n")
            self.write(render_lib_init_defines(self.namespace))
        super().render_postamble()
        self.write("#endif /*!defined(ICCLIB) */\n")


class IccLibSource(ArtifactEmitter):
    kind = ArtifactKind.ICCLIB_A_C
    membership = "c"
    flags = library_artifact_flags(is_header=False)
    comment_policy = CommentPolicy(cross_reference=True, context_doc=LIB_CONTEXT_DOC)
    enum_name = "META_FUNCTION_ENUM"

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        # Only functions needing context free access get code here, the rest live in the table.
        if not func.macro_function:
            return
        self.write(render_typedef(func, func.uses_lib_context))
        self.write(self.doc_comment(func, context_in_signature=False))
        self.write(self.extra_function(func, index))

    def extra_function(self, func: FunctionDescriptor, index: int) -> str:
        return render_direct_access_function(func, index)

    def render_postamble(self) -> None:
        self.write(self.render_global_structure())
        self.write(
            render_function_table("ICCGlobal_default", "NUM_ICCLIBFUNCTIONS", "icclib", self.table.names)
        )
        super().render_postamble()

    def render_global_structure(self) -> str:
        lines = [
            "",
            "/*! @brief This is the global structure that holds the",
            "           crypto library specific data.",
            "           Once it's loaded and the library has been validated",
            "           the first time we don't need to touch this again.",
            "*/",
            "struct ICClibGlobal_t Global = {",
            '\t"ICC", /*!< ID, Always ICC */',
            '\t"",    /*!< version */',
            '\t"",    /*!< load path */',
            "\tNULL,    /*!< OpenSSL library handle, now unused */",
            "\t{",
        ]
        openssl_prefix = self.namespace.openssl_prefix
        for func in self.context.registry.members(self.membership):
            target = f"my_{func.name}" if func.redirect else f"{openssl_prefix}{func.name}"
            lines.append(f'\t\t{{"{func.name}",(PFI){target}}},')
        lines.append("\t\t{NULL,NULL},")
        lines.append("\t},")
        lines.append("\t0,      /*!< unicode flag */")
        lines.append("\t0       /*!< Initialized , i.e. POST run etc */")
        lines.append("};")
        return "\n".join(lines) + "\n\n"


class IccLibHeader(ArtifactEmitter):
    kind = ArtifactKind.ICCLIB_A_H
    membership = "d"
    flags = library_artifact_flags(is_header=True)
    comment_policy = CommentPolicy(cross_reference=True, context_doc=LIB_CONTEXT_DOC)
    export_families = ("icclib",)

    def render_preamble(self) -> None:
        lib_table = self.require_table(ArtifactKind.ICCLIB_A_C)
        super().render_preamble()
        self.write(
            "\n/* Avoid symbol clashes between namespaced ICC's */\n"
            f"\n#define ICC_SCCSInfo ICC{self.namespace.prefix}_SCCSInfo\n\n"
        )
        # One extra slot for the {NULL,NULL} terminator of the Global table.
        self.write(f"\n#define NUM_ICCLIBFUNCTIONS {len(lib_table) + 1}\n\n")
        self.write(ICCLIB_STRUCTURES)

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        context_param = LIB_CONTEXT_PARAM if func.uses_lib_context else ""
        self.write(self.prototype(func, self.namespace.meta_prefix, context_param))

    def render_postamble(self) -> None:
        self.write(render_enum(self.require_table(ArtifactKind.ICCLIB_A_C)))
        self.write(render_lib_init_defines(self.namespace))
        super().render_postamble()


class IccPkgSource(ArtifactEmitter):
    kind = ArtifactKind.ICCPKG_A_C
    layout_dir = "iccpkg_dir"
    membership = "a"
    flags = api_artifact_flags(is_header=False, namespaces_types=True)
    comment_policy = CommentPolicy(namespace_types=True, context_doc=API_CONTEXT_DOC)
    enum_name = "ICC_FUNCTION_ENUM"

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        self.write(render_legacy_note(func))
        self.write(render_signature(func, self.namespace.api_prefix, API_CONTEXT_PARAM) + ";\n\n")
        self.write(self.indirect_function(func, index, API_TYPE_PREFIX))

    def render_postamble(self) -> None:
        self.write(render_enum(self.table))
        super().render_postamble()


class IccPkgHeader(ArtifactEmitter):
    kind = ArtifactKind.ICCPKG_A_H
    layout_dir = "iccpkg_dir"
    membership = "b"
    flags = api_artifact_flags(is_header=True, namespaces_types=True)
    comment_policy = CommentPolicy(context_doc=API_CONTEXT_DOC, legacy_warnings=True)

    def render_preamble(self) -> None:
        super().render_preamble()
        self.write(
            "/*! \\file iccpkg_a.h\n"
            "* Function prototypes for the ICC API (ICCSDK)\n"
            "* This file is autogenerated and should only be included via icc.h\n"
            "*/\n\n"
        )
        self.write(render_init_declarations("", with_defines=False))
        self.write(PATH_HELPER_DECLARATIONS)

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        if func.java_only:
            return
        self.write(self.doc_comment(func))
        self.write(render_signature(func, API_TYPE_PREFIX, API_CONTEXT_PARAM) + ";\n\n")


class DualContextWrapper(ArtifactEmitter):
    """Wrapper entry points that try the non-FIPS context first, then the FIPS (or legacy) one."""

    kind = ArtifactKind.GSK_WRAP2_A_C
    layout_dir = "iccpkg_dir"
    membership = "b"
    flags = api_artifact_flags(is_header=False, namespaces_types=True)
    comment_policy = CommentPolicy(namespace_types=True, context_doc=API_CONTEXT_DOC, legacy_warnings=True)
    export_families = ("gskstep", "gskstep_old", "jgskstep")

    def render_preamble(self) -> None:
        super().render_preamble()
        if self.namespace.is_fips:
            self.write("#define HAVE_C_ICC 1\n")
        elif self.context.has_legacy_input:
            self.write("#define HAVE_C_ICC 1\n#define HAVE_N_ICC 1\n")
        else:
            self.write("#define HAVE_N_ICC 1\n")

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        if func.name in HAND_WRITTEN_WRAPPERS:
            return
        self.write(render_signature(func, self.namespace.api_prefix, API_CONTEXT_PARAM) + ";\n")
        if func.legacy:
            self.write(render_signature(func, self.context.legacy_namespace.api_prefix, API_CONTEXT_PARAM) + ";\n")
        self.write(self.doc_comment(func))
        self.write(self.render_wrapper(func))

    def _context_call(self, func: FunctionDescriptor, member: str, prefix: str) -> list[str]:
        call = f"{prefix}{func.name}({render_call_arguments(func, f'wpcb->{member}')});"
        lines = [f"\t\tif(NULL != wpcb->{member}) {{"]
        if func.returns_void:
            lines.extend([f"\t\t\t{call}", "\t\t\treturn;"])
        else:
            lines.append(f"\t\t\treturn {call}")
        lines.append("\t\t}")
        return lines

    def render_wrapper(self, func: FunctionDescriptor) -> str:
        lines = [
            render_signature(func, API_TYPE_PREFIX, API_CONTEXT_PARAM),
            "{",
            "\tWICC_CTX *wpcb = (WICC_CTX *)pcb;",
        ]
        if func.name in STATUS_PREFILL_FUNCTIONS:
            lines.extend(
                [
                    "\tif(NULL != status) {",
                    "\t\tstatus->majRC = ICC_ERROR;",
                    "\t\tstatus->minRC = ICC_NOT_INITIALIZED;",
                    '\t\tstrncpy(status->desc,"ICC is not initialized (gsk_wrap2.c)",ICC_DESCLENGTH-1);',
                    "\t}",
                ]
            )
        lines.append("\tif(NULL != wpcb) {")
        if self.namespace.is_fips:
            lines.extend(self._context_call(func, "Cctx", self.namespace.api_prefix))
        else:
            lines.extend(self._context_call(func, "Nctx", self.namespace.api_prefix))
            if func.legacy:
                lines.extend(self._context_call(func, "Cctx", self.context.legacy_namespace.api_prefix))
            elif not func.returns_void and not func.returns_pointer:
                lines.append(f"\t\treturn ({func.return_type})ICC_NOT_IMPLEMENTED;")
        lines.append("\t}")
        value = failure_value(func.return_type)
        if value is None:
            lines.append("\treturn;")
        elif value == "NULL":
            lines.append(f"\treturn ({func.return_type})NULL;")
        else:
            lines.append(f"\treturn {value};")
        lines.append("}")
        return "\n".join(lines) + "\n\n"


class MuppetMakefile(ArtifactEmitter):
    kind = ArtifactKind.MUPPET_MK
    layout_dir = "iccpkg_dir"

    def render_preamble(self) -> None:
        if self.context.has_legacy_input:
            self.write("MUPPET\t=\t $(OLD_ICC)/iccsdk/$(ICCLIB)\n")
        else:
            self.write("MUPPET\t=\n")
        if self.namespace.is_fips:
            self.write("IS_FIPS\t=\t1\n")
        else:
            self.write("IS_FIPS\t=\n")

    def render_postamble(self) -> None:
        pass


class DriverScriptFragment(ArtifactEmitter):
    kind = ArtifactKind.ONE_SH
    layout_dir = "icc_test_dir"

    def render_preamble(self) -> None:
        if self.context.has_legacy_input:
            self.write('# Enable tests of GSkit-Crypto components\nGSKIT="yes"; export GSKIT\n')
        else:
            self.write('# Disable tests of GSkit-Crypto components\n#GSKIT="yes"; export GSKIT\n')

    def render_postamble(self) -> None:
        pass


class AuxSource(ArtifactEmitter):
    kind = ArtifactKind.ICC_AUX_A_C
    layout_dir = "iccpkg_dir"
    membership = "e"
    flags = api_artifact_flags(is_header=False, namespaces_types=False)
    enum_name = "ICC_AUX_FUNCTION_ENUM"

    def render_preamble(self) -> None:
        self.write("\n#if defined(ICC_AUX)\n")
        super().render_preamble()
        self.write("\n#endif /* defined(ICC_AUX) */\n")

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        self.write(render_typedef(func, typedef_passes_context(self.flags, func)))
        self.write(self.doc_comment(func))
        self.write(self.render_table_call(func, index))

    def render_table_call(self, func: FunctionDescriptor, index: int) -> str:
        """Like the indirect body, but the table is the aux library's own static funcs array."""
        typedef = func.typedef_name
        lines = [render_signature(func, API_TYPE_PREFIX, API_CONTEXT_PARAM), "{"]
        lines.extend(render_return_temp(func))
        lines.extend(
            [
                f"\t{typedef} tempf = NULL;",
                "\tif(NULL != funcs) {",
                f"\t\ttempf = ({typedef})funcs[{index}].func;",
                "\t}",
            ]
        )
        lines.extend(
            render_guarded_call(
                func,
                indent="\t",
                context_expr=call_context_expr(self.flags, func),
                extra_code=self.extra_code_in_function(func),
            )
        )
        warn_if_silent_failure(func, self.diagnostics)
        lines.append(render_return(func))
        lines.append("}")
        return "\n".join(lines) + "\n\n"

    def render_postamble(self) -> None:
        self.write(f"\n#define NUM_ICC_AUXFUNCTIONS {len(self.table)}\n\n")
        self.write(
            render_function_table("ICC_AUXGlobal_default", "NUM_ICC_AUXFUNCTIONS", "ICC_AUX", self.table.names)
        )
        self.write(render_enum(self.table))
        super().render_postamble()


class AuxHeader(ArtifactEmitter):
    kind = ArtifactKind.ICC_AUX_A_H
    layout_dir = "iccpkg_dir"
    membership = "f"
    flags = library_artifact_flags(is_header=True, context_param=API_CONTEXT_PARAM)
    export_families = ("aux",)

    def render_preamble(self) -> None:
        api_table = self.require_table(ArtifactKind.ICC_A_C)
        super().render_preamble()
        self.write(
            "/** \\file icc_aux_a.h\n"
            "* Function prototypes for the ICC extended API.\n"
            "* This file is autogenerated and should only be included via icc_aux.h.\n"
            "*/\n\n"
        )
        self.write(f"\n#define NUM_NON_AUXFUNCTIONS {len(api_table)}\n\n")
        self.write("#if !defined(ICC_AUX_H)\n")

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        if index == 0:
            self.write(f'#define FIRST_AUX_NAME "{func.name}"\n')
        self.write(self.doc_comment(func))
        self.write(render_signature(func, API_TYPE_PREFIX, API_CONTEXT_PARAM) + ";\n\n")

    def render_postamble(self) -> None:
        super().render_postamble()
        self.write("#endif /*!defined(ICC_AUX_H) */\n")


class JavaBindingHeader(ArtifactEmitter):
    kind = ArtifactKind.JCC_A_H
    layout_dir = "iccpkg_dir"
    membership = "b"
    flags = library_artifact_flags(is_header=True, context_param=API_CONTEXT_PARAM)

    def render_preamble(self) -> None:
        super().render_preamble()
        self.write(
            "/*! \\file jcc_a.h\n"
            "* Function prototypes for the ICC API (ICCSDK) - JCEPlus version\n"
            "* This file is autogenerated and should be included prior to icc.h\n"
            "*/\n\n"
        )
        self.write("#if defined(_WIN32)\n#  define ICC_InitW JCC_InitW\n#endif\n")
        for name in JAVA_ALIASED_FUNCTIONS:
            self.write(f"#define ICC_{name} JCC_{name}\n")

    def render_body(self, func: FunctionDescriptor, index: int) -> None:
        self.write(f"#define ICC_{func.name} JCC_{func.name}\n")


ARTIFACT_ORDER: tuple[type[ArtifactEmitter], ...] = (
    IccSource,
    IccHeader,
    IccLibSource,
    IccLibHeader,
    IccPkgSource,
    IccPkgHeader,
    DualContextWrapper,
    MuppetMakefile,
    DriverScriptFragment,
    AuxSource,
    AuxHeader,
    JavaBindingHeader,
)

ARTIFACTS_BY_NAME: dict[str, type[ArtifactEmitter]] = {cls.kind.value: cls for cls in ARTIFACT_ORDER}
