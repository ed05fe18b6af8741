"""gopp Substitution Engine

Walks a token stream and rewrites it:

    - ordinary tokens are replaced by the value of a macro of the same name
      (whole-token match only, never re-expanded)
    - tokens are dropped while an ifdef/ifndef/else block is suppressing
    - comments starting with the directive prefix are interpreted and never
      emitted
    - a directive alone on its line removes the whole line, NEWLINE included
    - other comments are kept unless comment stripping is on

Key design decisions:
  - Malformed directives are reported to the DiagnosticsSink and skipped;
    they never abort a run.
  - An ifdef left open at EOF is not reported. Output simply stops at the
    point where suppression began.
  - Each input unit gets its own macro table and conditional state; state is
    only carried over through explicit seeds (see ``Gopp.reset``).
"""

from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .conditional import ConditionalStack, ConditionalState
from .diagnostics import DiagnosticsSink
from .directives import DEFAULT_PREFIX, Malformed, parse_directive, strip_prefix
from .emitter import emit
from .lexer import Token, TokenType, tokenize
from .macro_table import MacroTable


VERSION = "0.4.2"


class PreprocessorError(Exception):
    """Raised when the engine is driven incorrectly by its caller."""
    pass


def iter_process(
    tokens: Iterable[Token],
    macros: MacroTable,
    prefix: str = DEFAULT_PREFIX,
    strip_comments: bool = False,
    state: Optional[ConditionalState] = None,
    sink: Optional[DiagnosticsSink] = None,
) -> Iterator[Token]:
    """Yield the rewritten token stream for *tokens*.

    Args:
        tokens:         Lexer output, terminated by an EOF token.
        macros:         Macro table, mutated by define/undef directives.
        prefix:         Comment prefix that marks a directive.
        strip_comments: Drop ordinary (non-directive) comments.
        state:          Conditional state; a fresh single-flag one if None.
        sink:           Receives malformed-directive diagnostics.

    Raises:
        PreprocessorError: If *macros* is None.
    """
    if macros is None:
        raise PreprocessorError("a macro table is required")
    if state is None:
        state = ConditionalState()
    if sink is None:
        sink = DiagnosticsSink()

    # Nothing has been yielded since the last NEWLINE.
    line_start = True
    # A directive alone on its line takes that line's NEWLINE with it.
    drop_newline = False

    for token in tokens:
        if token.type == TokenType.EOF:
            yield token
            return

        if token.type != TokenType.COMMENT:
            if state.suppressing:
                continue
            if token.type == TokenType.NEWLINE:
                if not drop_newline:
                    yield token
                line_start = True
                drop_newline = False
                continue
            line_start = False
            macro = macros.lookup(token.value)
            if macro is not None and macro.value is not None:
                yield replace(token, value=macro.value)
            else:
                yield token
            continue

        text = strip_prefix(token.value, prefix)
        if text is None:
            if not strip_comments and not state.suppressing:
                yield replace(token, value=token.value + "\n")
                line_start = False
            continue

        drop_newline = line_start
        directive = parse_directive(text)
        if isinstance(directive, Malformed):
            sink.report(token.line, token.column, token.value, directive.reason)
            continue
        state.apply(directive, macros)


def process(
    tokens: Iterable[Token],
    macros: MacroTable,
    prefix: str = DEFAULT_PREFIX,
    strip_comments: bool = False,
    state: Optional[ConditionalState] = None,
    sink: Optional[DiagnosticsSink] = None,
) -> List[Token]:
    """Return the rewritten token stream as a list. See ``iter_process``."""
    return list(iter_process(tokens, macros, prefix, strip_comments, state, sink))


class Gopp:
    """A preprocessor instance: macro table, conditional state and options.

    The macro ``_GOPP`` is always seeded with the gopp version.
    """

    def __init__(
        self,
        strip_comments: bool = False,
        prefix: str = DEFAULT_PREFIX,
        seeds: Optional[Mapping[str, Optional[str]]] = None,
        nested: bool = False,
        sink: Optional[DiagnosticsSink] = None,
    ):
        self.strip_comments = strip_comments
        self.prefix = prefix
        self.nested = nested
        self.seeds: Dict[str, Optional[str]] = {'_GOPP': VERSION}
        if seeds:
            self.seeds.update(seeds)
        self.sink = sink if sink is not None else DiagnosticsSink()
        self.macros = MacroTable(self.seeds)
        self.state = self._new_state()

    def _new_state(self) -> ConditionalState:
        return ConditionalStack() if self.nested else ConditionalState()

    def define_value(self, name: str, value: str) -> None:
        """Define *name* as a macro replaced by *value*."""
        self.macros.define_value(name, value)

    def define(self, name: str) -> None:
        """Define *name* as a flag, usable in ifdef/ifndef only."""
        self.macros.define_flag(name)

    def undefine(self, name: str) -> None:
        self.macros.undefine(name)

    @property
    def suppressing(self) -> bool:
        return self.state.suppressing

    def reset(self) -> None:
        """Start a new input unit: reseeded macros, fresh state, no diagnostics."""
        self.macros = MacroTable(self.seeds)
        self.state = self._new_state()
        self.sink.clear()

    def iter_process(self, tokens: Iterable[Token]) -> Iterator[Token]:
        return iter_process(tokens, self.macros, self.prefix,
                            self.strip_comments, self.state, self.sink)

    def process(self, tokens: Iterable[Token]) -> List[Token]:
        return list(self.iter_process(tokens))

    def parse(self, source: str) -> List[Token]:
        """Lex *source* and return the processed token stream."""
        return self.process(tokenize(source))

    def preprocess(self, source: str) -> str:
        """Lex, process and emit *source*; returns formatted Go text."""
        return emit(self.iter_process(tokenize(source)))


def preprocess(
    source: str,
    defines: Optional[Mapping[str, Optional[str]]] = None,
    strip_comments: bool = False,
    prefix: str = DEFAULT_PREFIX,
    nested: bool = False,
) -> str:
    """Preprocess *source* text in one shot and return the emitted text.

    Raises:
        LexerError:   If *source* cannot be tokenized.
        EmitterError: If the rewritten stream is not well formed.
    """
    gopp = Gopp(strip_comments=strip_comments, prefix=prefix,
                seeds=defines, nested=nested)
    return gopp.preprocess(source)
