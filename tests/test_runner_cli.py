"""
Popcorn Runner & CLI Tests
==========================
File execution, debug output, AST dumps and CLI exit codes.

Usage:
    python -m pytest tests/test_runner_cli.py -v
"""
import contextlib
import io
import json
import sys
import os
import tempfile
import unittest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from popcorn.cli import build_parser, main
from popcorn.errors import PopcornRuntimeError
from popcorn.runner import run_file, run_source
from popcorn.values import NumberValue

PROGRAM = """
fn add(a, b) {
  pop a + b
}
print("sum", add(10, 20))
add(1, 2)
"""


class RunnerTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, name, source):
        path = os.path.join(self.tmpdir, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(source)
        return path


class TestRunSource(RunnerTestCase):

    def test_returns_final_value_and_prints(self):
        output = []
        result = run_source(PROGRAM, output_fn=output.append)
        self.assertEqual(result, NumberValue(3))
        self.assertEqual(output, ["sum 30"])

    def test_show_tokens_and_ast(self):
        output = []
        run_source("let x = 1", show_tokens=True, show_ast=True, output_fn=output.append)
        self.assertEqual(output[0], "=== TOKENS ===")
        self.assertIn("0: Token(LET, 'let', L1:1)", output)
        self.assertIn("=== AST ===", output)

    def test_dump_ast_writes_file(self):
        target = os.path.join(self.tmpdir, "current_ast.json")
        run_source("let x = 1", dump_ast=target, output_fn=lambda s: None)
        with open(target, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["body"][0]["kind"], "VariableDeclaration")

    def test_errors_propagate(self):
        with self.assertRaises(PopcornRuntimeError):
            run_source("1 + true", output_fn=lambda s: None)


class TestRunFile(RunnerTestCase):

    def test_success(self):
        path = self.write("ok.pop", PROGRAM)
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            code = run_file(path)
        self.assertEqual(code, 0)
        self.assertEqual(stdout.getvalue().splitlines(), ["sum 30", "⟹ 3"])

    def test_bundled_examples_run(self):
        examples = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "examples")
        expected = {"hello.pop": "⟹ 3", "counter.pop": "⟹ 610"}
        for name, last_line in expected.items():
            stdout = io.StringIO()
            with contextlib.redirect_stdout(stdout):
                code = run_file(os.path.join(examples, name))
            self.assertEqual(code, 0, name)
            self.assertEqual(stdout.getvalue().splitlines()[-1], last_line)

    def test_missing_file(self):
        stderr = io.StringIO()
        code = run_file(os.path.join(self.tmpdir, "nope.pop"), stderr=stderr)
        self.assertEqual(code, 1)
        self.assertIn("File not found", stderr.getvalue())

    def test_runtime_error(self):
        path = self.write("bad.pop", "let x = 1\nx()")
        stderr = io.StringIO()
        code = run_file(path, stderr=stderr)
        self.assertEqual(code, 1)
        self.assertIn("Error running file: NotCallableError", stderr.getvalue())

    def test_lexer_error(self):
        path = self.write("bad.pop", "let x = @")
        stderr = io.StringIO()
        self.assertEqual(run_file(path, stderr=stderr), 1)
        self.assertIn("LexerError", stderr.getvalue())


class TestCli(RunnerTestCase):

    def test_parser_defaults_to_repl(self):
        args = build_parser().parse_args([])
        self.assertIsNone(args.command)

    def test_run_flags(self):
        args = build_parser().parse_args(["run", "a.pop", "--tokens", "--dump-ast", "out.json"])
        self.assertEqual(args.file, "a.pop")
        self.assertTrue(args.tokens)
        self.assertFalse(args.ast)
        self.assertEqual(args.dump_ast, "out.json")

    def test_run_command_exit_codes(self):
        good = self.write("good.pop", "let x = 10 + 20")
        bad = self.write("bad.pop", "const y = 1\ny = 2")
        with contextlib.redirect_stdout(io.StringIO()) as out, \
                contextlib.redirect_stderr(io.StringIO()) as err:
            self.assertEqual(main(["run", good]), 0)
            self.assertEqual(main(["run", bad]), 1)
        self.assertIn("⟹ 30", out.getvalue())
        self.assertIn("ConstantError", err.getvalue())

    def test_ast_command_writes_json(self):
        source = self.write("prog.pop", "let x = 1")
        target = os.path.join(self.tmpdir, "prog.json")
        with contextlib.redirect_stdout(io.StringIO()):
            self.assertEqual(main(["ast", source, "-o", target]), 0)
        with open(target, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["kind"], "Program")

    def test_ast_command_prints_json(self):
        source = self.write("prog.pop", "1")
        with contextlib.redirect_stdout(io.StringIO()) as out:
            self.assertEqual(main(["ast", source]), 0)
        self.assertEqual(json.loads(out.getvalue())["body"][0]["kind"], "NumericLiteral")

    def test_ast_command_errors(self):
        bad = self.write("bad.pop", "let = 1")
        with contextlib.redirect_stderr(io.StringIO()) as err:
            self.assertEqual(main(["ast", bad]), 1)
            self.assertEqual(main(["ast", os.path.join(self.tmpdir, "missing.pop")]), 1)
        self.assertIn("ParserError", err.getvalue())
        self.assertIn("File not found", err.getvalue())


if __name__ == "__main__":
    unittest.main()
