"""
Popcorn AST JSON Tests
======================
Tagged JSON dumps of the AST and loading them back.

Usage:
    python -m pytest tests/test_ast_json.py -v
"""
import json
import sys
import os
import unittest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from popcorn.interpreter import Interpreter
from popcorn.lexer import tokenize
from popcorn.nodes import (
    NODE_CLASSES, ProgramNode, ast_from_json, ast_to_json, dump_ast, load_ast,
)
from popcorn.parser import produce_ast
from popcorn.values import NumberValue

SAMPLE = """
fn makeCounter(start) {
  let count = start
  fn inc() {
    count = count + 1
    pop count
  }
  pop inc
}
const c = makeCounter(10)
let data = { items: [1, "two", null, true], c }
if (data.items[0] == 1 && !false) { c() } else { pop -1 }
for (let i = 0; i < 2; i = i + 1) { c() }
c()
"""


class TestDump(unittest.TestCase):

    def test_declaration_shape(self):
        data = dump_ast(produce_ast(tokenize("let x = 10 + 20")))
        self.assertEqual(data["kind"], "Program")
        decl = data["body"][0]
        self.assertEqual(decl["kind"], "VariableDeclaration")
        self.assertEqual(decl["identifier"], "x")
        self.assertFalse(decl["constant"])
        self.assertEqual(decl["value"]["kind"], "BinaryExpr")
        self.assertEqual(decl["value"]["operator"], "+")
        self.assertEqual(decl["value"]["left"], {"kind": "NumericLiteral", "value": 10.0, "line": 1, "col": 9})

    def test_dump_is_json_serializable(self):
        text = ast_to_json(produce_ast(tokenize(SAMPLE)))
        self.assertEqual(json.loads(text)["kind"], "Program")

    def test_every_node_kind_is_registered(self):
        for kind, cls in NODE_CLASSES.items():
            self.assertEqual(cls().node_type, kind)
        self.assertIn("ObjectLiteral", NODE_CLASSES)
        self.assertIn("NullLiteral", NODE_CLASSES)


class TestLoad(unittest.TestCase):

    def test_round_trip_preserves_structure(self):
        program = produce_ast(tokenize(SAMPLE))
        restored = ast_from_json(ast_to_json(program))
        self.assertIsInstance(restored, ProgramNode)
        self.assertEqual(restored, program)

    def test_loaded_program_evaluates_identically(self):
        program = produce_ast(tokenize(SAMPLE))
        restored = load_ast(dump_ast(program))
        results = []
        for ast in (program, restored):
            interp = Interpreter(output_fn=lambda s: None)
            results.append(interp.evaluate(ast, interp.make_environment()))
        self.assertEqual(results[0], NumberValue(14))
        self.assertEqual(results[0], results[1])

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            load_ast({"kind": "Lambda", "body": []})


if __name__ == "__main__":
    unittest.main()
