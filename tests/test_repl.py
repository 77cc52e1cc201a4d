"""
Popcorn REPL Tests
==================
Retained bindings, REPL commands, multi-line input and the highlighter.

Usage:
    python -m pytest tests/test_repl.py -v
"""
import re
import sys
import os
import unittest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from popcorn.highlight import highlight
from popcorn.repl import CONTINUATION_PROMPT, PROMPT, Repl, is_incomplete
from popcorn.values import NumberValue

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def scripted(lines):
    """input_fn that replays `lines`, then signals end of input."""
    queue = list(lines)
    prompts = []

    def read(prompt):
        prompts.append(prompt)
        if not queue:
            raise EOFError
        return queue.pop(0)

    read.prompts = prompts
    return read


class TestReplHandle(unittest.TestCase):

    def setUp(self):
        self.output = []
        self.repl = Repl(input_fn=scripted([]), output_fn=self.output.append, color=False)

    def test_bindings_persist_between_inputs(self):
        self.assertTrue(self.repl.handle("let x = 5"))
        self.assertTrue(self.repl.handle("x + 1"))
        self.assertEqual(self.output, ["   ← 5", "   ← 6"])

    def test_null_results_are_not_echoed(self):
        self.repl.handle("let x")
        self.assertEqual(self.output, [])

    def test_error_is_reported_and_loop_continues(self):
        self.repl.handle("let x = 1")
        self.assertTrue(self.repl.handle("y + 1"))
        self.assertTrue(self.output[-1].startswith("⚠ UndefinedVariableError: Cannot resolve variable 'y'"))
        self.assertEqual(self.repl.eval_source("x"), NumberValue(1))

    def test_parse_error_is_reported(self):
        self.repl.handle("let = 1")
        self.assertTrue(self.output[-1].startswith("⚠ ParserError"))

    def test_print_goes_to_output(self):
        self.repl.handle('print("hi")')
        self.assertEqual(self.output, ["hi"])

    def test_env_command(self):
        self.repl.handle("let a = 1")
        self.repl.handle('const b = "s"')
        self.output.clear()
        self.repl.handle("env")
        self.assertEqual(self.output, ["  let a = 1", '  const b = "s"'])

    def test_env_command_when_empty(self):
        self.repl.handle("env")
        self.assertEqual(self.output, ["  (no bindings)"])

    def test_clear_resets_environment(self):
        self.repl.handle("let a = 1")
        self.repl.handle("clear")
        self.assertEqual(self.output[-1], "(state cleared)")
        self.repl.handle("a")
        self.assertTrue(self.output[-1].startswith("⚠ UndefinedVariableError"))

    def test_help(self):
        self.repl.handle("help")
        self.assertIn("Commands:", self.output[-1])

    def test_exit_and_quit_stop_the_loop(self):
        self.assertFalse(self.repl.handle("exit"))
        self.assertFalse(self.repl.handle("  QUIT  "))

    def test_blank_input_is_ignored(self):
        self.assertTrue(self.repl.handle("   "))
        self.assertEqual(self.output, [])


class TestReplLoop(unittest.TestCase):

    def test_multi_line_function(self):
        output = []
        read = scripted(["let a = 1", "fn f() {", "  pop a", "}", "f()", "exit"])
        env = Repl(input_fn=read, output_fn=output.append, color=False).loop()

        self.assertIn("   ← <fn f()>", output)
        self.assertIn("   ← 1", output)
        self.assertEqual(read.prompts.count(CONTINUATION_PROMPT), 2)
        self.assertEqual(read.prompts[0], PROMPT)
        self.assertTrue(env.has("f"))

    def test_end_of_input_stops_loop(self):
        output = []
        env = Repl(input_fn=scripted(["let z = 3"]), output_fn=output.append, color=False).loop()
        self.assertEqual(env.get("z"), NumberValue(3))

    def test_is_incomplete(self):
        self.assertTrue(is_incomplete("fn f() {"))
        self.assertTrue(is_incomplete("[1,"))
        self.assertTrue(is_incomplete('let s = "abc'))
        self.assertFalse(is_incomplete("1 + 1"))
        self.assertFalse(is_incomplete("}"))
        self.assertFalse(is_incomplete("let x = 1 # 2"))


class TestHighlight(unittest.TestCase):

    def test_highlight_keeps_text(self):
        line = 'let greeting = "hi"  // comment'
        self.assertEqual(ANSI.sub("", highlight(line)), line)

    def test_unlexable_line_is_unchanged(self):
        self.assertEqual(highlight("let x = 1 # 2"), "let x = 1 # 2")

    def test_blank_line(self):
        self.assertEqual(highlight("   "), "   ")


if __name__ == "__main__":
    unittest.main()
