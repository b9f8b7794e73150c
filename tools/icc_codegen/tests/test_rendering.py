from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[3]
SRC_ROOT = REPO_ROOT / "tools" / "icc_codegen" / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from icc_codegen.common import Diagnostics
from icc_codegen.parser import parse_declaration
from icc_codegen.registry import build_symbol_table
from icc_codegen.rendering import (
    API_CONTEXT_DOC,
    CommentPolicy,
    api_artifact_flags,
    failure_value,
    library_artifact_flags,
    render_direct_access_function,
    render_doc_comment,
    render_enum,
    render_indirect_body,
    render_signature,
    render_typedef,
)


class FailureValueTests(unittest.TestCase):
    def test_failure_values(self) -> None:
        self.assertIsNone(failure_value("void"))
        self.assertEqual(failure_value("char *"), "NULL")
        self.assertEqual(failure_value("int"), "(int)ICC_FAILURE")
        self.assertEqual(failure_value("unsigned long"), "(unsigned long)ICC_FAILURE")


class SignatureTests(unittest.TestCase):
    def test_public_signature_has_linkage(self) -> None:
        func = parse_declaration("1a int Foo(int x)")
        self.assertEqual(render_signature(func, "ICC_", "ICC_CTX *pcb"), "int ICC_LINKAGE ICC_Foo(ICC_CTX *pcb,int x)")

    def test_library_signature_without_context(self) -> None:
        func = parse_declaration("1d void Reset(void)")
        self.assertEqual(render_signature(func, "CC_"), "void CC_Reset(void)")
        self.assertEqual(render_signature(func, "", "ICClib *pcb"), "void Reset(ICClib *pcb)")

    def test_typedef_with_and_without_context(self) -> None:
        func = parse_declaration("1aP int Bar(int y)")
        self.assertEqual(render_typedef(func, False), "typedef int (*fptr_Bar)(int y);\n")
        self.assertEqual(render_typedef(func, True), "typedef int (*fptr_Bar)(void *pcb,int y);\n")


class IndirectBodyTests(unittest.TestCase):
    def test_public_indirect_body(self) -> None:
        func = parse_declaration("1aE int Foo(int x)")
        body = render_indirect_body(
            func,
            flags=api_artifact_flags(is_header=False, namespaces_types=True),
            prefix="ICC_",
            index=3,
            diagnostics=Diagnostics(),
        )
        expected = (
            "int ICC_LINKAGE ICC_Foo(ICC_CTX *pcb,int x)\n"
            "{\n"
            "\tint temp = (int)ICC_FAILURE;\n"
            "\t/* Note PCB is always checked for NULL in the calling function */\n"
            "\tif (NULL != pcb->funcs) {\n"
            "\t\tfptr_Foo tempf = (fptr_Foo)(*(pcb->funcs))[3].func;\n"
            "\t\tif( NULL != tempf ) {\n"
            "\t\t\ttemp = (tempf)(x);\n"
            "\t\t}\n"
            "\t}\n"
            "\treturn temp;\n"
            "}\n\n"
        )
        self.assertEqual(body, expected)

    def test_library_context_is_forwarded(self) -> None:
        func = parse_declaration("1aP void Bar(int y)")
        body = render_indirect_body(
            func,
            flags=api_artifact_flags(is_header=False, namespaces_types=True),
            prefix="ICC_",
            index=0,
            diagnostics=Diagnostics(),
        )
        self.assertIn("\t\t\t(tempf)((void*)pcb->funcs,y);\n", body)
        self.assertNotIn("temp =", body)
        self.assertTrue(body.endswith("\treturn;\n}\n\n"))

    def test_error_sensitive_library_call_checks_fips_state(self) -> None:
        func = parse_declaration("1cEP int Baz(int z)")
        body = render_indirect_body(
            func,
            flags=library_artifact_flags(is_header=False),
            prefix="",
            index=1,
            diagnostics=Diagnostics(),
        )
        self.assertIn("if( NULL != tempf && !((pcb->flags & ICC_FIPS_FLAG) && error_state) ) {", body)

    def test_error_sensitive_void_warns(self) -> None:
        diagnostics = Diagnostics()
        func = parse_declaration("1aE void Quiet(int x)")
        render_indirect_body(
            func,
            flags=api_artifact_flags(is_header=False, namespaces_types=True),
            prefix="ICC_",
            index=0,
            diagnostics=diagnostics,
        )
        self.assertEqual(len(diagnostics), 1)
        self.assertIn("Quiet", diagnostics.messages()[0])
        self.assertIn("silent failures", diagnostics.messages()[0])

    def test_repeated_render_warns_once(self) -> None:
        diagnostics = Diagnostics()
        func = parse_declaration("1aE void Quiet(int x)")
        for prefix in ("ICC_", "ICCN_"):
            render_indirect_body(
                func,
                flags=api_artifact_flags(is_header=False, namespaces_types=True),
                prefix=prefix,
                index=0,
                diagnostics=diagnostics,
            )
        diagnostics.warn("Couldn't match legacy Gone")
        self.assertEqual(len(diagnostics), 2)
        self.assertIn("Quiet", diagnostics.messages()[0])

    def test_direct_access_stub(self) -> None:
        stub = render_direct_access_function(parse_declaration("1cF int Foo(int x)"), 2)
        self.assertIn("int efFoo(int x)\n{\n", stub)
        self.assertIn("\tfptr_Foo tempf = (fptr_Foo)Global.funcs[2].func;\n", stub)
        self.assertIn("\t\ttemp = (tempf)(x);\n", stub)

        stub = render_direct_access_function(parse_declaration("1cFP void Bar(int y)"), 0)
        self.assertIn("\t\t(tempf)(NULL,y);\n", stub)


class DocCommentTests(unittest.TestCase):
    COMMENT = " * @brief Does foo\n%PCB% * @param x the x\n * @return 1 on success\n"

    def test_empty_comment_renders_nothing(self) -> None:
        func = parse_declaration("1a int Foo(int x)")
        self.assertEqual(render_doc_comment(func, CommentPolicy(cross_reference=True)), "")

    def test_full_public_comment(self) -> None:
        func = parse_declaration("1aE int Foo(int x)", self.COMMENT)
        policy = CommentPolicy(cross_reference=True, fips_callback_note=True, context_doc=API_CONTEXT_DOC)
        expected = (
            "/*!\n"
            " * @brief Does foo\n"
            f"{API_CONTEXT_DOC}"
            " * @param x the x\n"
            " * @return\n"
            " *  ICC_FAILURE if a FIPS mode error occurred, 1 on success\n"
            " *\n"
            " * <b>Indirect call to:</b> \\ref Foo()\n"
            " *  @see ICC_RC_ENUM\n"
            "*/\n"
        )
        self.assertEqual(render_doc_comment(func, policy), expected)

    def test_marker_removed_without_context_parameter(self) -> None:
        func = parse_declaration("1d int Foo(int x)", self.COMMENT)
        text = render_doc_comment(func, CommentPolicy(context_doc=API_CONTEXT_DOC), context_in_signature=False)
        self.assertNotIn("%PCB%", text)
        self.assertNotIn("@param pcb", text)

    def test_legacy_warning_for_non_legacy_functions(self) -> None:
        func = parse_declaration("1b char *Name(int x)", self.COMMENT)
        text = render_doc_comment(func, CommentPolicy(legacy_warnings=True))
        self.assertIn("NULL if the API is not supported by an older ICC instance,", text)
        self.assertIn("@note WARNING! This function is not implemented by all ICC contexts.", text)

    def test_fips_callback_note_only_for_flagged_functions(self) -> None:
        policy = CommentPolicy(fips_callback_note=True)
        flagged = render_doc_comment(parse_declaration("1aC int Foo(int x)", self.COMMENT), policy)
        plain = render_doc_comment(parse_declaration("1a int Foo(int x)", self.COMMENT), policy)
        self.assertIn("FIPS algorithm callback", flagged)
        self.assertNotIn("FIPS algorithm callback", plain)


class EnumTests(unittest.TestCase):
    def test_enum_has_explicit_indices_and_sentinel(self) -> None:
        funcs = [parse_declaration("1a int One(int x)"), parse_declaration("1a int Two(int x)")]
        text = render_enum(build_symbol_table("icc_a.c", "ICC_FUNCTION_ENUM", funcs))
        self.assertIn("typedef enum\n{\n\tindexOf_One = 0,\n\tindexOf_Two = 1,\n\tindexOf_TableEnd\n} ICC_FUNCTION_ENUM;\n", text)


if __name__ == "__main__":
    unittest.main()
