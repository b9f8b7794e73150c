from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[3]
SRC_ROOT = REPO_ROOT / "tools" / "icc_codegen" / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from icc_codegen.namespacing import (
    expand_prefix_template,
    namespace_comment,
    namespace_descriptor,
    namespace_type,
)
from icc_codegen.parser import parse_declaration


class NamespaceTypeTests(unittest.TestCase):
    def test_prefixes_known_stem(self) -> None:
        self.assertEqual(namespace_type("EVP_MD_CTX *"), "ICC_EVP_MD_CTX *")
        self.assertEqual(namespace_type("const EC_KEY *"), "const ICC_EC_KEY *")

    def test_longest_stem_wins(self) -> None:
        self.assertEqual(namespace_type("ECDSA_SIG *"), "ICC_ECDSA_SIG *")
        self.assertEqual(namespace_type("PRNG_CTX *"), "ICC_PRNG_CTX *")

    def test_idempotent(self) -> None:
        once = namespace_type("BIGNUM *")
        self.assertEqual(once, "ICC_BIGNUM *")
        self.assertEqual(namespace_type(once), once)

    def test_unknown_type_untouched(self) -> None:
        self.assertEqual(namespace_type("unsigned char *"), "unsigned char *")
        self.assertEqual(namespace_type("int"), "int")

    def test_descriptor_rewrites_return_and_arguments(self) -> None:
        func = parse_declaration("1a RSA *Make(const BIGNUM *e, int bits)")
        namespaced = namespace_descriptor(func)
        self.assertEqual(namespaced.return_type, "ICC_RSA *")
        self.assertEqual([arg.render() for arg in namespaced.parameters], ["const ICC_BIGNUM *e", "int bits"])
        self.assertEqual(func.return_type, "RSA *")


class NamespaceCommentTests(unittest.TestCase):
    def test_space_preceded_words_are_prefixed(self) -> None:
        text = "/*!\n * @brief Frees an EVP_PKEY and its RSA key\n"
        self.assertEqual(
            namespace_comment(text),
            "/*!\n * @brief Frees an ICC_EVP_PKEY and its ICC_RSA key\n",
        )

    def test_every_occurrence_is_prefixed(self) -> None:
        self.assertEqual(namespace_comment("x DH and DH"), "x ICC_DH and ICC_DH")

    def test_words_without_space_are_left(self) -> None:
        self.assertEqual(namespace_comment("x (RSA)"), "x (RSA)")


class PrefixTemplateTests(unittest.TestCase):
    def test_define_gets_cross_reference(self) -> None:
        self.assertEqual(
            expand_prefix_template("C", "#define ICC_Init ICC@Prefix@_Init\n"),
            "/*! \\sa ICCC_Init */\n#define ICC_Init ICCC_Init\n",
        )

    def test_non_define_is_substituted(self) -> None:
        self.assertEqual(
            expand_prefix_template("N", "ICC_CTX * ICC_LINKAGE ICC@Prefix@_Init(void);"),
            "ICC_CTX * ICC_LINKAGE ICCN_Init(void);",
        )

    def test_text_without_placeholder_is_returned(self) -> None:
        self.assertEqual(expand_prefix_template("C", "#endif\n"), "#endif\n")


if __name__ == "__main__":
    unittest.main()
