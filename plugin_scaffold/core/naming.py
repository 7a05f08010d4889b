"""
Naming utilities for generated identifiers.

Handles word segmentation and case conversions used to name generated
classes, files and constants, plus plugin name normalization.
"""

import re
from enum import Enum
from typing import List


class NamingCase(Enum):
    """Different naming case styles."""
    KEBAB_CASE = "kebab"      # user-name
    PASCAL_CASE = "pascal"    # UserName
    CAMEL_CASE = "camel"      # userName
    CONSTANT_CASE = "constant"  # USER_NAME


PLUGIN_NAME_PATTERN = re.compile(r"^[a-z][a-z-0-9]+$")

_PLUGIN_SUFFIX = re.compile(r"-?plugin$", re.IGNORECASE)
_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_UPPER_RUN = re.compile(r"([A-Z])([A-Z][a-z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")


def split_words(name: str) -> List[str]:
    """
    Split an identifier into its words.

    Boundaries are runs of non-alphanumeric characters, a lowercase letter
    or digit followed by an uppercase letter, and the last capital of an
    uppercase run that starts a new capitalized word ("XMLHttp" -> XML, Http).

    Args:
        name: Identifier in any case style

    Returns:
        List of words, original casing preserved
    """
    spaced = _LOWER_UPPER.sub(r"\1 \2", name)
    spaced = _UPPER_RUN.sub(r"\1 \2", spaced)
    return [word for word in _SEPARATORS.split(spaced) if word]


def kebab_case(name: str) -> str:
    """Convert to kebab-case."""
    return "-".join(word.lower() for word in split_words(name))


def _pascal_word(word: str, index: int) -> str:
    # A word after the first that starts with a digit gets a "_" separator.
    if index > 0 and word[:1].isdigit():
        return "_" + word[:1] + word[1:].lower()
    return word[:1].upper() + word[1:].lower()


def pascal_case(name: str) -> str:
    """Convert to PascalCase, e.g. "shop-2-plugin" -> "Shop_2Plugin"."""
    return "".join(_pascal_word(word, index) for index, word in enumerate(split_words(name)))


def camel_case(name: str) -> str:
    """Convert to camelCase."""
    pascal = pascal_case(name)
    words = split_words(name)
    if not words:
        return pascal
    first = words[0].lower()
    return first + pascal[len(first):]


def constant_case(name: str) -> str:
    """Convert to CONSTANT_CASE."""
    return "_".join(word.upper() for word in split_words(name))


def convert_case(name: str, target_case: NamingCase) -> str:
    """Convert name to target case style."""
    if target_case == NamingCase.KEBAB_CASE:
        return kebab_case(name)
    elif target_case == NamingCase.PASCAL_CASE:
        return pascal_case(name)
    elif target_case == NamingCase.CAMEL_CASE:
        return camel_case(name)
    elif target_case == NamingCase.CONSTANT_CASE:
        return constant_case(name)
    else:
        return name


def strip_plugin_suffix(name: str) -> str:
    """Remove one trailing "plugin" or "-plugin", any case."""
    return _PLUGIN_SUFFIX.sub("", name)


def normalize_plugin_name(name: str) -> str:
    """
    Normalize a plugin name so it carries exactly one "-plugin" suffix.

    Args:
        name: User supplied plugin name, e.g. "reviews" or "reviews-plugin"

    Returns:
        Normalized name, e.g. "reviews-plugin"
    """
    return strip_plugin_suffix(name) + "-plugin"


def plugin_file_stem(name: str) -> str:
    """
    Kebab-case stem for the plugin directory and file names.

    The "plugin" suffix is dropped; a name that is nothing but the suffix
    keeps it so the stem is never empty.
    """
    return kebab_case(strip_plugin_suffix(name)) or kebab_case(name)


def validate_plugin_name(name: str):
    """
    Validate a user supplied plugin name.

    Returns:
        Error message, or None when the name is acceptable
    """
    if not PLUGIN_NAME_PATTERN.match(name or ""):
        return (
            "The plugin name must be lowercase and contain only letters, "
            "numbers and dashes"
        )
    return None


def validate_class_name(name: str):
    """Validate a PascalCase class name, returning an error message or None."""
    if not re.match(r"^[A-Z][A-Za-z0-9]*$", name or ""):
        return "The name must be in PascalCase, e.g. ProductReview"
    return None
