"""
Parser, Declaration and Dependency Extractor Tests.

Validates that:
  1. Malformed, binary and package-less sources are rejected outright
  2. Import tables resolve implicit and explicit aliases
  3. Type descriptors come from explicit types and initializer shapes
  4. Dependencies are same-file, first-seen, deduplicated and order-sensitive
"""

import os
import sys
import tempfile
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from godiscover.declarations import TypeDescriptor, extract_declarations
from godiscover.dependencies import extract_dependencies
from godiscover.errors import GoParseError, SourceReadError
from godiscover.go_parser import (
    extract_imports, is_builtin_ident, is_builtin_type, is_keyword, parse_file, parse_source,
)


def _decls(source: str):
    tree = parse_source(source, "test.go")
    return tree, {d.name: d for d in extract_declarations(tree)}


# ═══════════════════════════════════════════════════════════════════════
#  Parsing
# ═══════════════════════════════════════════════════════════════════════

class TestParseSource(unittest.TestCase):

    def test_valid_source(self):
        tree = parse_source("package ok\n\nvar A = 1\n", "ok.go")
        self.assertEqual(tree.path, "ok.go")
        self.assertEqual(tree.root.type, "source_file")

    def test_accepts_str_and_bytes(self):
        self.assertEqual(parse_source(b"package a\n").root.type, "source_file")
        self.assertEqual(parse_source("package a\n").root.type, "source_file")

    def test_syntax_error_is_localized(self):
        with self.assertRaises(GoParseError) as ctx:
            parse_source("package broken\n\nvar A = &Kind{\n", "broken.go")
        err = ctx.exception
        self.assertEqual(err.path, "broken.go")
        self.assertGreaterEqual(err.line, 1)
        self.assertGreaterEqual(err.column, 1)
        self.assertTrue(str(err).startswith("broken.go:"))

    def test_garbage_is_rejected(self):
        with self.assertRaises(GoParseError):
            parse_source("package x\n\nvar = = =\n", "garbage.go")

    def test_missing_package_clause(self):
        with self.assertRaises(GoParseError) as ctx:
            parse_source("var A = 1\n", "nopkg.go")
        self.assertIn("package", str(ctx.exception))

    def test_binary_content(self):
        with self.assertRaises(GoParseError):
            parse_source(b"\x00\x01\x02package x", "blob.go")

    def test_parse_file_missing(self):
        with self.assertRaises(SourceReadError) as ctx:
            parse_file("/nonexistent/file.go")
        self.assertEqual(ctx.exception.path, "/nonexistent/file.go")

    def test_parse_file_reads_disk(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "a.go")
            with open(path, "w", encoding="utf-8") as f:
                f.write("package a\n\nvar X = 1\n")
            tree = parse_file(path)
            self.assertEqual(tree.path, path)
            self.assertEqual([d.name for d in extract_declarations(tree)], ["X"])


class TestImports(unittest.TestCase):

    def test_single_import(self):
        tree = parse_source('package a\n\nimport "github.com/example/schema"\n')
        self.assertEqual(extract_imports(tree), {"schema": "github.com/example/schema"})

    def test_grouped_and_aliased_imports(self):
        tree = parse_source(
            "package a\n\n"
            "import (\n"
            '\t"fmt"\n'
            '\ts "github.com/example/schema"\n'
            '\t. "github.com/example/dot"\n'
            '\t_ "github.com/example/sideeffect"\n'
            ")\n"
        )
        self.assertEqual(extract_imports(tree), {
            "fmt": "fmt",
            "s": "github.com/example/schema",
            ".": "github.com/example/dot",
            "_": "github.com/example/sideeffect",
        })

    def test_no_imports(self):
        self.assertEqual(extract_imports(parse_source("package a\n")), {})


class TestBuiltins(unittest.TestCase):

    def test_tables(self):
        self.assertTrue(is_builtin_type("string"))
        self.assertFalse(is_builtin_type("NodeType"))
        self.assertTrue(is_builtin_ident("nil"))
        self.assertTrue(is_builtin_ident("append"))
        self.assertTrue(is_keyword("var"))
        self.assertFalse(is_keyword("Var"))


# ═══════════════════════════════════════════════════════════════════════
#  Declarations
# ═══════════════════════════════════════════════════════════════════════

class TestDeclarations(unittest.TestCase):

    def test_explicit_types(self):
        _, d = _decls(
            "package a\n\n"
            "var Plain Kind\n"
            "var Qualified schema.NodeType\n"
            "var Ptr *schema.NodeType\n"
            "var Slice []schema.NodeType\n"
            "var Array [3]*schema.NodeType\n"
            "var Chan chan schema.Event\n"
            "var M map[string]schema.NodeType\n"
        )
        self.assertEqual(d["Plain"].type, TypeDescriptor("", "Kind"))
        self.assertEqual(d["Qualified"].type, TypeDescriptor("schema", "NodeType"))
        self.assertEqual(d["Ptr"].type, TypeDescriptor("schema", "NodeType"))
        self.assertEqual(d["Slice"].type, TypeDescriptor("schema", "NodeType"))
        self.assertEqual(d["Array"].type, TypeDescriptor("schema", "NodeType"))
        self.assertEqual(d["Chan"].type, TypeDescriptor("schema", "Event"))
        self.assertIsNone(d["M"].type)
        self.assertIsNone(d["Plain"].value)

    def test_inferred_types(self):
        _, d = _decls(
            "package a\n\n"
            "var Lit = schema.NodeType{Label: \"x\"}\n"
            "var Addr = &schema.NodeType{}\n"
            "var Elems = []*schema.NodeType{}\n"
            "var Conv = schema.NodeType(other)\n"
            "var Local = &Kind{}\n"
            "var Str = \"plain\"\n"
            "var Num = 42\n"
        )
        self.assertEqual(d["Lit"].type, TypeDescriptor("schema", "NodeType"))
        self.assertEqual(d["Addr"].type, TypeDescriptor("schema", "NodeType"))
        self.assertEqual(d["Elems"].type, TypeDescriptor("schema", "NodeType"))
        self.assertEqual(d["Conv"].type, TypeDescriptor("schema", "NodeType"))
        self.assertEqual(d["Local"].type, TypeDescriptor("", "Kind"))
        self.assertIsNone(d["Str"].type)
        self.assertIsNone(d["Num"].type)

    def test_explicit_type_wins_over_value(self):
        _, d = _decls("package a\n\nvar X schema.Base = &schema.NodeType{}\n")
        self.assertEqual(d["X"].type, TypeDescriptor("schema", "Base"))
        self.assertIsNotNone(d["X"].value)

    def test_grouped_and_multi_name_specs(self):
        tree, d = _decls(
            "package a\n\n"
            "var (\n"
            "\tG1 = &Kind{}\n"
            "\tG2, G3 = &Kind{}, \"plain\"\n"
            "\tP, Q Kind\n"
            ")\n"
            "var R, S = pair()\n"
        )
        names = [x.name for x in extract_declarations(tree)]
        self.assertEqual(names, ["G1", "G2", "G3", "P", "Q", "R", "S"])
        self.assertEqual(d["G2"].type, TypeDescriptor("", "Kind"))
        self.assertIsNone(d["G3"].type)
        self.assertEqual(d["Q"].type, TypeDescriptor("", "Kind"))
        self.assertEqual(d["R"].type, TypeDescriptor("", "pair"))
        self.assertIsNone(d["S"].value)
        self.assertIsNone(d["S"].type)

    def test_only_top_level_vars(self):
        tree, d = _decls(
            "package a\n\n"
            "const C = 1\n"
            "type T struct{}\n"
            "func f() {\n"
            "\tvar inner = &Kind{}\n"
            "\t_ = inner\n"
            "}\n"
            "func (t T) m() {\n"
            "\tvar alsoInner = 1\n"
            "\t_ = alsoInner\n"
            "}\n"
            "var Outer = &Kind{}\n"
        )
        self.assertEqual(list(d), ["Outer"])

    def test_line_numbers(self):
        _, d = _decls("package a\n\nvar A = 1\n\nvar (\n\tB = 2\n)\n")
        self.assertEqual(d["A"].line, 3)
        self.assertEqual(d["B"].line, 6)


# ═══════════════════════════════════════════════════════════════════════
#  Dependencies
# ═══════════════════════════════════════════════════════════════════════

class TestDependencies(unittest.TestCase):

    def test_filters_to_known_names(self):
        tree, d = _decls("package a\n\nvar X = &Kind{Ref: A, Other: B, Again: A}\n")
        deps = extract_dependencies(d["X"].value, tree, {"A", "X"})
        self.assertEqual(deps, ["A"])

    def test_first_seen_order(self):
        tree, d = _decls("package a\n\nvar X = []*Kind{C, A, B, A, C}\n")
        deps = extract_dependencies(d["X"].value, tree, {"A", "B", "C"})
        self.assertEqual(deps, ["C", "A", "B"])

    def test_nested_expressions(self):
        tree, d = _decls(
            "package a\n\n"
            "var X = &Kind{Name: fmt.Sprintf(\"%s\", A.Name), List: []string{f(B)}}\n"
        )
        deps = extract_dependencies(d["X"].value, tree, {"A", "B", "Name"})
        # Field selectors and keys are identifiers too
        self.assertEqual(deps, ["Name", "A", "B"])

    def test_no_value(self):
        tree, _ = _decls("package a\n")
        self.assertEqual(extract_dependencies(None, tree, {"A"}), [])

    def test_empty_known_names(self):
        tree, d = _decls("package a\n\nvar X = &Kind{Ref: A}\n")
        self.assertEqual(extract_dependencies(d["X"].value, tree, set()), [])


if __name__ == "__main__":
    unittest.main()
