"""Unit tests for the TypeScript source scanner."""

from __future__ import annotations

import pytest

from plugin_scaffold.core.errors import SourceError
from plugin_scaffold.core.source import (
    ImportDeclaration,
    find_closing,
    find_statement_end,
    line_indent,
    mask_source,
    parse_import_clause,
    parse_imports,
    split_top_level,
)


class TestMaskSource:
    """Tests for comment and string masking."""

    def test_length_preserved(self):
        text = "const a = 'x(y'; // comment {\n/* block [ */ const b = `t`;"
        assert len(mask_source(text)) == len(text)

    def test_strings_and_comments_blanked(self):
        masked = mask_source("const a = 'x(y'; // {\nconst b = \"]\";")
        assert "(" not in masked
        assert "{" not in masked
        assert "]" not in masked
        assert masked.count("\n") == 1
        assert "const b" in masked

    def test_escaped_quotes(self):
        masked = mask_source("const a = 'it\\'s {'; const b = 1;")
        assert "{" not in masked
        assert "const b = 1;" in masked


class TestBrackets:
    """Tests for bracket matching and list splitting."""

    def test_find_closing_nested(self):
        text = "f({ a: [1, 2], b: (3) })"
        assert find_closing(text, 1) == len(text) - 1
        assert find_closing(text, 2) == len(text) - 2

    def test_find_closing_unbalanced(self):
        with pytest.raises(SourceError):
            find_closing("[1, 2", 0)
        with pytest.raises(SourceError):
            find_closing("[1, 2)", 0)

    def test_split_top_level(self):
        text = "[a, f(b, c), { d: 1, e: 2 }, ]"
        spans = split_top_level(text, 1, len(text) - 1)
        assert [text[s:e] for s, e in spans] == ["a", "f(b, c)", "{ d: 1, e: 2 }"]

    def test_split_empty(self):
        assert split_top_level("[  ]", 1, 3) == []

    def test_find_statement_end(self):
        text = "x = Symbol('A'); y = 2;"
        masked = mask_source(text)
        start = text.index("Symbol")
        assert text[start:find_statement_end(masked, start)] == "Symbol('A')"

    def test_line_indent(self):
        text = "a\n    b: [\n"
        assert line_indent(text, text.index("[")) == "    "


class TestImports:
    """Tests for import parsing and rendering."""

    def test_parse_clause(self):
        assert parse_import_clause("{ A, B as C }") == (False, None, None, ["A", "B as C"])
        assert parse_import_clause("path") == (False, "path", None, [])
        assert parse_import_clause("* as path") == (False, None, "path", [])
        assert parse_import_clause("type { CodegenConfig }") == (True, None, None, ["CodegenConfig"])
        assert parse_import_clause("React, { useState }") == (False, "React", None, ["useState"])

    def test_parse_imports(self):
        text = (
            "import { A, B } from './a';\n"
            "import * as path from \"path\";\n"
            "import {\n    C,\n    D,\n} from '../c';\n"
            "\nconst x = 'import { Z } from \"z\"';\n"
        )
        imports = parse_imports(text)
        assert [i.module_specifier for i in imports] == ["./a", "path", "../c"]
        assert imports[0].named_imports == ["A", "B"]
        assert imports[1].namespace_import == "path"
        assert imports[2].named_imports == ["C", "D"]
        assert text[imports[0].start:imports[0].end] == "import { A, B } from './a';\n"

    def test_imported_names_resolve_aliases(self):
        declaration = ImportDeclaration("./x", named_imports=["A as B", "C"], default_import="D")
        assert declaration.imported_names == ["B", "C", "D"]

    def test_render(self):
        declaration = ImportDeclaration("./reviews.plugin", named_imports=["ReviewsPlugin"])
        assert declaration.render() == "import { ReviewsPlugin } from './reviews.plugin';\n"
        assert ImportDeclaration("path", namespace_import="path").render() == "import * as path from 'path';\n"
        assert (
            ImportDeclaration("@x/y", named_imports=["T"], type_only=True).render()
            == "import type { T } from '@x/y';\n"
        )
