"""
Lightweight TypeScript source scanning.

The project model edits TypeScript as text. This module provides the
structural primitives it needs: masking comments and string literals so
searches only see code, bracket matching, splitting comma-separated lists
at the top nesting level, and parsing import declarations.

All positions are offsets into the original text; masking never changes
the length of the source.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import SourceError

OPEN_BRACKETS = {"(": ")", "[": "]", "{": "}"}
CLOSE_BRACKETS = {")": "(", "]": "[", "}": "{"}

IMPORT_PATTERN = re.compile(
    r"^[ \t]*import\s+(?P<clause>[\w\s{},*$]+?)\s+from\s+"
    r"(?P<quote>['\"])(?P<module>[^'\"\n]*)(?P=quote)[ \t]*;?[ \t]*\n?",
    re.MULTILINE,
)

Span = Tuple[int, int]


def mask_source(text: str) -> str:
    """
    Blank out comments and the contents of string literals.

    String delimiters are kept so that literals remain visible as tokens;
    newlines are kept so line-based searches still line up.

    Args:
        text: TypeScript source

    Returns:
        Masked source of the same length
    """
    out = list(text)
    length = len(text)
    i = 0

    def blank(start: int, end: int):
        for j in range(start, end):
            if text[j] != "\n":
                out[j] = " "

    while i < length:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if ch == "/" and nxt == "/":
            end = text.find("\n", i)
            end = length if end == -1 else end
            blank(i, end)
            i = end
        elif ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            end = length if end == -1 else end + 2
            blank(i, end)
            i = end
        elif ch in "'\"`":
            j = i + 1
            while j < length and text[j] != ch:
                if text[j] == "\\":
                    j += 2
                    continue
                if ch != "`" and text[j] == "\n":
                    break
                j += 1
            j = min(j, length)
            blank(i + 1, j)
            i = j + 1
        else:
            i += 1

    return "".join(out)


def find_closing(masked: str, open_index: int) -> int:
    """
    Find the bracket that closes the one at open_index.

    Args:
        masked: Masked source (see mask_source)
        open_index: Offset of an opening bracket

    Returns:
        Offset of the matching closing bracket

    Raises:
        SourceError: If brackets are unbalanced
    """
    if masked[open_index] not in OPEN_BRACKETS:
        raise SourceError(f"No opening bracket at offset {open_index}")

    stack = []
    for i in range(open_index, len(masked)):
        ch = masked[i]
        if ch in OPEN_BRACKETS:
            stack.append(ch)
        elif ch in CLOSE_BRACKETS:
            if not stack or stack[-1] != CLOSE_BRACKETS[ch]:
                raise SourceError(f"Unbalanced '{ch}' at offset {i}")
            stack.pop()
            if not stack:
                return i

    raise SourceError(f"Unclosed '{masked[open_index]}' at offset {open_index}")


def split_top_level(masked: str, start: int, end: int, separator: str = ",") -> List[Span]:
    """
    Split masked[start:end] on separators at nesting depth zero.

    Returns:
        Spans of the non-empty items, trimmed of surrounding whitespace
    """
    spans = []
    depth = 0
    item_start = start

    for i in range(start, end + 1):
        ch = masked[i] if i < end else separator
        if ch in OPEN_BRACKETS:
            depth += 1
        elif ch in CLOSE_BRACKETS:
            depth -= 1
        elif ch == separator and depth == 0:
            span = _trim(masked, item_start, i)
            if span[0] < span[1]:
                spans.append(span)
            item_start = i + 1

    return spans


def find_statement_end(masked: str, start: int) -> int:
    """
    Find the end of an expression that starts at start.

    The expression ends at the first ";" at depth zero, at a closing bracket
    that was opened before it, or at the end of the source.
    """
    depth = 0
    for i in range(start, len(masked)):
        ch = masked[i]
        if ch in OPEN_BRACKETS:
            depth += 1
        elif ch in CLOSE_BRACKETS:
            if depth == 0:
                return _trim(masked, start, i)[1]
            depth -= 1
        elif ch in ";," and depth == 0:
            return _trim(masked, start, i)[1]
    return _trim(masked, start, len(masked))[1]


def line_indent(text: str, offset: int) -> str:
    """Return the leading whitespace of the line containing offset."""
    line_start = text.rfind("\n", 0, offset) + 1
    match = re.match(r"[ \t]*", text[line_start:])
    return match.group(0)


def _trim(text: str, start: int, end: int) -> Span:
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


@dataclass
class ImportDeclaration:
    """A parsed `import ... from '...'` statement."""

    module_specifier: str
    named_imports: List[str] = field(default_factory=list)
    default_import: Optional[str] = None
    namespace_import: Optional[str] = None
    type_only: bool = False
    start: int = 0
    end: int = 0

    @property
    def imported_names(self) -> List[str]:
        """Local names bound by this import, aliases resolved."""
        names = [part.split(" as ")[-1].strip() for part in self.named_imports]
        if self.default_import:
            names.append(self.default_import)
        if self.namespace_import:
            names.append(self.namespace_import)
        return names

    def is_relative(self) -> bool:
        return self.module_specifier.startswith(".")

    def render(self) -> str:
        """Render the declaration as a single line of source."""
        clauses = []
        if self.default_import:
            clauses.append(self.default_import)
        if self.namespace_import:
            clauses.append(f"* as {self.namespace_import}")
        if self.named_imports:
            clauses.append("{ " + ", ".join(self.named_imports) + " }")
        prefix = "import type " if self.type_only else "import "
        return f"{prefix}{', '.join(clauses)} from '{self.module_specifier}';\n"


def parse_import_clause(clause: str) -> Tuple[bool, Optional[str], Optional[str], List[str]]:
    """
    Parse the part of an import between `import` and `from`.

    Returns:
        (type_only, default_import, namespace_import, named_imports)
    """
    clause = " ".join(clause.split())
    type_only = False
    if clause.startswith("type "):
        type_only = True
        clause = clause[len("type "):]

    named = []
    brace_match = re.search(r"\{(.*)\}", clause)
    if brace_match:
        named = [part.strip() for part in brace_match.group(1).split(",") if part.strip()]
        clause = clause[: brace_match.start()] + clause[brace_match.end():]

    default_import = None
    namespace_import = None
    for part in (p.strip() for p in clause.split(",")):
        if not part:
            continue
        namespace_match = re.match(r"\*\s+as\s+([\w$]+)$", part)
        if namespace_match:
            namespace_import = namespace_match.group(1)
        else:
            default_import = part

    return type_only, default_import, namespace_import, named


def parse_imports(text: str, masked: Optional[str] = None) -> List[ImportDeclaration]:
    """Parse all top-level import declarations in a source file."""
    masked = masked if masked is not None else mask_source(text)
    declarations = []

    for match in IMPORT_PATTERN.finditer(masked):
        type_only, default_import, namespace_import, named = parse_import_clause(
            match.group("clause")
        )
        module_start, module_end = match.span("module")
        declarations.append(
            ImportDeclaration(
                module_specifier=text[module_start:module_end],
                named_imports=named,
                default_import=default_import,
                namespace_import=namespace_import,
                type_only=type_only,
                start=match.start(),
                end=match.end(),
            )
        )

    return declarations
