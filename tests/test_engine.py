"""Tests for the gopp substitution engine.

Covers:
  - whole-token macro substitution and pass-through
  - ifdef / ifndef / else / endif with the single-flag model
  - define / undef inside emitted and suppressed blocks
  - malformed directive reporting
  - ordinary comment handling (kept / stripped / suppressed)
  - seeding, reset and the nested (stack) extension
"""

import unittest
import sys
import os
import textwrap

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from src.gopp.conditional import ConditionalState
from src.gopp.diagnostics import DiagnosticsSink
from src.gopp.engine import Gopp, PreprocessorError, VERSION, process, preprocess
from src.gopp.lexer import Token, TokenType, tokenize
from src.gopp.macro_table import MacroTable


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def values(tokens):
    """Token texts without NEWLINE / EOF noise."""
    return [t.value for t in tokens if t.type not in (TokenType.NEWLINE, TokenType.EOF)]


def run(source: str, macros: MacroTable = None, strip: bool = False, sink=None):
    if macros is None:
        macros = MacroTable()
    tokens = tokenize(textwrap.dedent(source))
    return values(process(tokens, macros, strip_comments=strip, sink=sink))


# ---------------------------------------------------------------------------
# Substitution
# ---------------------------------------------------------------------------

class TestSubstitution(unittest.TestCase):

    def test_pass_through_without_macros(self):
        tokens = tokenize("x := foo(1, \"s\")\n")
        out = process(tokens, MacroTable())
        self.assertEqual(out, tokens)

    def test_exact_match_substitution(self):
        macros = MacroTable({'X': '123'})
        self.assertEqual(run("X XY X1 X\n", macros), ['123', 'XY', 'X1', '123'])

    def test_substituted_token_keeps_kind_and_position(self):
        macros = MacroTable({'X': '123'})
        tokens = tokenize("a X\n")
        out = process(tokens, macros)
        self.assertEqual(out[1].type, TokenType.IDENTIFIER)
        self.assertEqual((out[1].line, out[1].column), (1, 3))
        self.assertEqual(out[1].value, '123')

    def test_input_tokens_are_not_mutated(self):
        macros = MacroTable({'X': '123'})
        tokens = tokenize("X\n")
        process(tokens, macros)
        self.assertEqual(tokens[0].value, 'X')

    def test_flag_macro_passes_through(self):
        macros = MacroTable()
        macros.define_flag('DEBUG')
        self.assertEqual(run("DEBUG\n", macros), ['DEBUG'])

    def test_value_is_not_re_expanded(self):
        macros = MacroTable({'A': 'B', 'B': 'C'})
        self.assertEqual(run("A B\n", macros), ['B', 'C'])

    def test_string_contents_are_not_substituted(self):
        macros = MacroTable({'X': '1'})
        self.assertEqual(run('"X" X\n', macros), ['"X"', '1'])

    def test_define_directive_then_use(self):
        self.assertEqual(run("""\
            //gopp:define OS "Linux"
            os := OS
        """), ['os', ':=', '"Linux"'])

    def test_define_overwrites_previous(self):
        self.assertEqual(run("""\
            //gopp:define VAL 1
            //gopp:define VAL 2
            VAL
        """), ['2'])

    def test_substitution_stops_after_undef(self):
        self.assertEqual(run("""\
            //gopp:define VAL 99
            a VAL
            //gopp:undef VAL
            b VAL
        """), ['a', '99', 'b', 'VAL'])

    def test_value_with_spaces_is_verbatim(self):
        self.assertEqual(run("""\
            //gopp:define SUM 1 +  2
            SUM
        """), ['1 +  2'])


# ---------------------------------------------------------------------------
# Conditionals (single flag)
# ---------------------------------------------------------------------------

class TestConditionals(unittest.TestCase):

    def test_ifdef_else_endif_defined(self):
        macros = MacroTable()
        macros.define_flag('FOO')
        self.assertEqual(run("""\
            //gopp:ifdef FOO
            A B
            //gopp:else
            C D
            //gopp:endif
        """, macros), ['A', 'B'])

    def test_ifdef_else_endif_undefined(self):
        self.assertEqual(run("""\
            //gopp:ifdef FOO
            A B
            //gopp:else
            C D
            //gopp:endif
            E
        """), ['C', 'D', 'E'])

    def test_ifndef_with_undefined_macro(self):
        self.assertEqual(run("""\
            //gopp:ifndef BAR
            body
            //gopp:else
            other
            //gopp:endif
        """), ['body'])

    def test_ifndef_with_defined_macro(self):
        macros = MacroTable({'BAR': '1'})
        self.assertEqual(run("""\
            //gopp:ifndef BAR
            body
            //gopp:endif
            after
        """, macros), ['after'])

    def test_stray_endif_is_noop(self):
        self.assertEqual(run("""\
            a
            //gopp:endif
            b
        """), ['a', 'b'])

    def test_define_inside_suppressed_block_is_inert(self):
        macros = MacroTable()
        run("""\
            //gopp:ifdef UNDEFINED_FLAG
            //gopp:define X "999"
            //gopp:endif
        """, macros)
        self.assertNotIn('X', macros)

    def test_undef_inside_suppressed_block_is_inert(self):
        macros = MacroTable({'X': '1'})
        run("""\
            //gopp:ifdef UNDEFINED_FLAG
            //gopp:undef X
            //gopp:endif
        """, macros)
        self.assertIn('X', macros)

    def test_else_toggles_unconditionally(self):
        self.assertEqual(run("""\
            a
            //gopp:else
            b
            //gopp:else
            c
        """), ['a', 'c'])

    def test_second_ifdef_reevaluates_flag(self):
        """Blocks do not nest: the inner ifdef overrides the outer one."""
        macros = MacroTable()
        macros.define_flag('INNER')
        self.assertEqual(run("""\
            //gopp:ifdef OUTER
            x
            //gopp:ifdef INNER
            y
            //gopp:endif
            z
            //gopp:endif
        """, macros), ['y', 'z'])

    def test_unterminated_block_truncates_silently(self):
        state = ConditionalState()
        sink = DiagnosticsSink()
        tokens = tokenize("a\n//gopp:ifdef NOPE\nb\n")
        out = process(tokens, MacroTable(), state=state, sink=sink)
        self.assertEqual(values(out), ['a'])
        self.assertTrue(state.unterminated)
        self.assertEqual(len(sink), 0)

    def test_directive_case_insensitive(self):
        self.assertEqual(run("""\
            //gopp:IFDEF FOO
            a
            //gopp:Else
            b
            //gopp:ENDIF
        """), ['b'])

    def test_directives_nested_in_code(self):
        macros = MacroTable()
        macros.define_flag('WINDOWS')
        self.assertEqual(run("""\
            func main() {
                //gopp:ifdef WINDOWS
                win()
                //gopp:endif
            }
        """, macros), ['func', 'main', '(', ')', '{', 'win', '(', ')', '}'])


# ---------------------------------------------------------------------------
# Malformed directives
# ---------------------------------------------------------------------------

class TestMalformed(unittest.TestCase):

    def test_define_without_space(self):
        macros = MacroTable()
        sink = DiagnosticsSink()
        with self.assertLogs('src.gopp.diagnostics', level='WARNING'):
            out = run("//gopp:definewithnospace\n", macros, sink=sink)
        self.assertEqual(out, [])
        self.assertEqual(len(sink), 1)
        self.assertEqual(len(macros), 0)

    def test_diagnostic_carries_position_and_text(self):
        sink = DiagnosticsSink(path='main.go')
        with self.assertLogs('src.gopp.diagnostics', level='WARNING') as logs:
            run("x\n  //gopp:ifdef\n", sink=sink)
        diagnostic = sink.diagnostics[0]
        self.assertEqual((diagnostic.line, diagnostic.column), (2, 3))
        self.assertEqual(diagnostic.raw, '//gopp:ifdef')
        self.assertIn('main.go:2:3', logs.output[0])

    def test_malformed_does_not_change_state(self):
        sink = DiagnosticsSink()
        with self.assertLogs('src.gopp.diagnostics', level='WARNING'):
            out = run("""\
                //gopp:ifdef
                a
                //gopp:bogus X
                b
            """, sink=sink)
        self.assertEqual(out, ['a', 'b'])
        self.assertEqual(len(sink), 2)

    def test_malformed_inside_suppressed_block_is_reported(self):
        sink = DiagnosticsSink()
        with self.assertLogs('src.gopp.diagnostics', level='WARNING'):
            run("""\
                //gopp:ifdef NOPE
                //gopp:define ONLYNAME
                //gopp:endif
            """, sink=sink)
        self.assertEqual(len(sink), 1)

    def test_missing_macro_table_is_caller_error(self):
        with self.assertRaises(PreprocessorError):
            process(tokenize("a\n"), None)


# ---------------------------------------------------------------------------
# Ordinary comments
# ---------------------------------------------------------------------------

class TestComments(unittest.TestCase):

    def test_comment_kept_with_line_terminator(self):
        out = process(tokenize("// hello\n"), MacroTable())
        comments = [t for t in out if t.type == TokenType.COMMENT]
        self.assertEqual([c.value for c in comments], ['// hello\n'])

    def test_comment_stripped(self):
        self.assertEqual(run("// hello\na\n", strip=True), ['a'])

    def test_comment_dropped_while_suppressing(self):
        self.assertEqual(run("""\
            //gopp:ifdef NOPE
            // hidden
            //gopp:endif
            // shown
        """), ['// shown\n'])

    def test_stripping_independent_of_macros(self):
        macros = MacroTable({'hello': 'bye'})
        self.assertEqual(run("// hello\n", macros), ['// hello\n'])
        self.assertEqual(run("// hello\n", macros, strip=True), [])

    def test_directive_comment_never_emitted(self):
        out = run("//gopp:define X 1\n//gopp:endif\n")
        self.assertEqual(out, [])

    def test_custom_prefix(self):
        gopp = Gopp(prefix='// +pp:')
        out = values(gopp.parse("// +pp:define X 7\nX\n//gopp:define Y 1\n"))
        self.assertEqual(out, ['7', '//gopp:define Y 1\n'])


# ---------------------------------------------------------------------------
# Gopp instances
# ---------------------------------------------------------------------------

class TestGopp(unittest.TestCase):

    def test_builtin_version_macro(self):
        gopp = Gopp()
        self.assertEqual(gopp.macros.lookup('_GOPP').value, VERSION)

    def test_define_api(self):
        gopp = Gopp()
        gopp.define_value('N', '5')
        gopp.define('FLAG')
        self.assertEqual(values(gopp.parse("N FLAG\n")), ['5', 'FLAG'])
        gopp.undefine('N')
        self.assertIsNone(gopp.macros.lookup('N'))

    def test_reset_reseeds(self):
        gopp = Gopp(seeds={'OS': '"linux"'})
        gopp.parse("//gopp:define X 1\n//gopp:undef OS\n//gopp:ifdef NOPE\n")
        self.assertTrue(gopp.suppressing)
        gopp.reset()
        self.assertFalse(gopp.suppressing)
        self.assertNotIn('X', gopp.macros)
        self.assertEqual(gopp.macros.lookup('OS').value, '"linux"')
        self.assertIn('_GOPP', gopp.macros)

    def test_reset_clears_diagnostics(self):
        gopp = Gopp()
        with self.assertLogs('src.gopp.diagnostics', level='WARNING'):
            gopp.parse("//gopp:nope\n")
        self.assertEqual(len(gopp.sink), 1)
        gopp.reset()
        self.assertEqual(len(gopp.sink), 0)

    def test_iter_process_is_lazy(self):
        gopp = Gopp()
        stream = gopp.iter_process(tokenize("//gopp:define X 1\nX\n"))
        self.assertNotIn('X', gopp.macros)
        first = next(stream)
        self.assertEqual(first.value, '1')
        self.assertIn('X', gopp.macros)

    def test_eof_is_forwarded_and_terminates(self):
        eof = Token(TokenType.EOF, "", 1, 1)
        tokens = [Token(TokenType.IDENTIFIER, "a", 1, 1), eof,
                  Token(TokenType.IDENTIFIER, "b", 1, 3)]
        out = process(tokens, MacroTable())
        self.assertEqual([t.value for t in out], ['a', ''])
        self.assertEqual(out[-1].type, TokenType.EOF)

    def test_nested_extension(self):
        source = """\
            //gopp:ifdef OUTER
            //gopp:ifdef INNER
            x
            //gopp:endif
            y
            //gopp:endif
            z
        """
        gopp = Gopp(nested=True, seeds={'INNER': None})
        self.assertEqual(values(gopp.parse(textwrap.dedent(source))), ['z'])


# ---------------------------------------------------------------------------
# One-shot preprocess
# ---------------------------------------------------------------------------

class TestPreprocess(unittest.TestCase):

    def test_preprocess_renders_text(self):
        result = preprocess(textwrap.dedent("""\
            package main

            //gopp:ifdef WINDOWS
            const OS = "windows"
            //gopp:else
            const OS = "linux"
            //gopp:endif
        """))
        self.assertEqual(result, 'package main\n\nconst OS = "linux"\n')

    def test_preprocess_with_defines(self):
        result = preprocess("const N = SIZE\n", defines={'SIZE': '64'})
        self.assertEqual(result, "const N = 64\n")

    def test_directive_lines_leave_no_blank_lines(self):
        source = "a := 1\n//gopp:ifdef _GOPP\nb := 2\n//gopp:endif\nc := 3\n"
        self.assertEqual(preprocess(source), "a := 1\nb := 2\nc := 3\n")

    def test_suppressed_block_leaves_no_blank_lines(self):
        source = "a\n//gopp:ifdef NOPE\nb\n//gopp:else\nc\n//gopp:endif\nd\n"
        self.assertEqual(preprocess(source), "a\nc\nd\n")

    def test_blank_line_before_directive_is_kept(self):
        source = "a\n\n//gopp:define X 1\nb := X\n"
        self.assertEqual(preprocess(source), "a\n\nb := 1\n")

    def test_trailing_directive_keeps_its_line(self):
        source = "x := 1 //gopp:define A 2\ny := A\n"
        self.assertEqual(preprocess(source), "x := 1\ny := 2\n")

    def test_malformed_directive_line_is_dropped(self):
        with self.assertLogs('src.gopp.diagnostics', level='WARNING'):
            result = preprocess("a\n//gopp:bogus\nb\n")
        self.assertEqual(result, "a\nb\n")


if __name__ == '__main__':
    unittest.main()
