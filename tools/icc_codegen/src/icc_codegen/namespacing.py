from __future__ import annotations

from dataclasses import replace

from .config import API_TYPE_PREFIX
from .parser import FunctionDescriptor

# Longest first: a shorter stem must never claim the prefix meant for a longer one.
PREPEND_WORDS = (
    "PKCS8_PRIV_KEY_INFO",
    "EC_builtin_curve",
    "ECDSA_METHOD",
    "ECDH_METHOD",
    "ASN1_OBJECT",
    "X509_ALGOR",
    "ECDSA_SIG",
    "EC_METHOD",
    "EC_POINT",
    "EC_GROUP",
    "PRNG_CTX",
    "AES_GCM",
    "DSA_SIG",
    "EC_KEY",
    "BIGNUM",
    "PRNG",
    "CMAC",
    "HMAC",
    "KDF",
    "DES",
    "DSA",
    "EVP",
    "RSA",
    "BN",
    "DH",
)

PREFIX_PLACEHOLDER = "@Prefix@"


def namespace_type(text: str, prefix: str = API_TYPE_PREFIX) -> str:
    """Prefix the first known type stem found in a declared type.

    Only the first word (in PREPEND_WORDS order) that occurs is rewritten. Text
    that already carries the prefix in front of that word is returned as is.
    """
    for word in PREPEND_WORDS:
        idx = text.find(word)
        if idx < 0:
            continue
        if text[:idx].endswith(prefix):
            return text
        return text[:idx] + prefix + text[idx:]
    return text


def namespace_comment(text: str, prefix: str = API_TYPE_PREFIX) -> str:
    for word in PREPEND_WORDS:
        needle = f" {word}"
        idx = text.rfind(needle)
        while idx > 0:
            text = text[: idx + 1] + prefix + text[idx + 1 :]
            idx = text.rfind(needle)
    return text


def namespace_descriptor(func: FunctionDescriptor, prefix: str = API_TYPE_PREFIX) -> FunctionDescriptor:
    return replace(
        func,
        return_type=namespace_type(func.return_type, prefix),
        arguments=tuple(
            replace(arg, base_type=namespace_type(arg.base_type, prefix)) if arg.base_type else arg
            for arg in func.arguments
        ),
    )


def expand_prefix_template(prefix: str, template: str) -> str:
    """Substitute @Prefix@; #define lines also get a doxygen cross reference to their target."""
    if PREFIX_PLACEHOLDER not in template:
        return template
    expanded = template.replace(PREFIX_PLACEHOLDER, prefix, 1)
    if "#define" not in template:
        return expanded
    target = expanded.split()[-1]
    return f"/*! \\sa {target} */\n{expanded}"
