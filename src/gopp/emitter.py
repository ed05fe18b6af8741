"""gopp Emitter

Renders a processed token stream back into Go source text with a canonical
layout: one tab of indentation per line-level bracket nesting, single spaces
between tokens except where Go style glues them, and at most one blank line
in a row.

Macro values are spliced in as raw text, so before rendering every token
value is lexed again and bracket nesting is checked over the whole stream.
A substitution that does not lex, smuggles in a line comment, or unbalances
brackets raises EmitterError.
"""

from typing import Iterable, List, Optional

from .lexer import LexerError, Token, TokenType, tokenize


OPENERS = {'(': ')', '[': ']', '{': '}'}
CLOSERS = {')': '(', ']': '[', '}': '{'}

# Tokens that never take a space before them.
_NO_SPACE_BEFORE = frozenset({')', ']', ',', ';', '.', ':', '++', '--'})
# Tokens that never take a space after them.
_NO_SPACE_AFTER = frozenset({'(', '[', '.', '...'})
_UNARY = frozenset({'!', '^', '&', '*', '-', '+', '<-'})
# After these a prefix operator is unary.
_UNARY_CONTEXT = frozenset({'(', '[', '{', ',', ';', ':'})
_NAME_TYPES = (TokenType.IDENTIFIER, TokenType.KEYWORD)


class EmitterError(Exception):
    """Raised when the processed stream cannot be rendered as valid source."""
    def __init__(self, message: str, token: Optional[Token] = None):
        loc = f"{token.line}:{token.column}: " if token else ""
        super().__init__(f"Emitter error: {loc}{message}")
        self.token = token


def check(tokens: List[Token]) -> None:
    """Verify that every token lexes and that brackets balance."""
    stack: List[tuple] = []

    for token in tokens:
        if token.type in (TokenType.COMMENT, TokenType.NEWLINE, TokenType.EOF):
            continue
        try:
            pieces = tokenize(token.value)
        except LexerError as e:
            raise EmitterError(f"cannot lex {token.value!r}: {e}", token)

        for piece in pieces:
            if piece.type == TokenType.COMMENT and piece.value.startswith('//'):
                raise EmitterError(f"line comment inside {token.value!r}", token)
            if piece.value in OPENERS and piece.type == TokenType.DELIMITER:
                stack.append((piece.value, token))
            elif piece.value in CLOSERS and piece.type == TokenType.DELIMITER:
                if not stack or stack[-1][0] != CLOSERS[piece.value]:
                    raise EmitterError(f"unexpected '{piece.value}'", token)
                stack.pop()

    if stack:
        opener, token = stack[-1]
        raise EmitterError(f"unclosed '{opener}'", token)


def _is_unary(op: Token, before: Optional[Token]) -> bool:
    if op.value not in _UNARY:
        return False
    if before is None:
        return True
    return (before.type in (TokenType.OPERATOR, TokenType.KEYWORD)
            or before.value in _UNARY_CONTEXT)


def _needs_space(prev2: Optional[Token], prev: Token, cur: Token,
                 in_index: bool) -> bool:
    if prev.value in _NO_SPACE_AFTER or cur.value in _NO_SPACE_BEFORE:
        return False
    # calls, indexing, func literals, f()() and func(){...}()
    if cur.value in ('(', '[') and (prev.type == TokenType.IDENTIFIER
                                    or prev.value in (')', ']', '}', 'func')):
        return False
    if cur.value == '...' and (prev.type == TokenType.IDENTIFIER
                               or prev.value in (')', ']')):
        return False
    # []int, map[string]int
    if prev.value == ']' and cur.type in _NAME_TYPES:
        return False
    # []int{...} composite literals
    if (cur.value == '{' and prev.type in _NAME_TYPES
            and prev2 is not None and prev2.value == ']'):
        return False
    if prev.value == '{' or cur.value == '}':
        return False
    if prev.value == ':' and in_index:
        return False
    if _is_unary(prev, prev2):
        return False
    return True


def render_line(tokens: List[Token]) -> str:
    """Join the tokens of one output line with canonical spacing."""
    parts: List[str] = []
    brackets: List[str] = []
    prev2: Optional[Token] = None
    prev: Optional[Token] = None

    for token in tokens:
        if prev is not None and _needs_space(prev2, prev, token,
                                             bool(brackets) and brackets[-1] == '['):
            parts.append(' ')
        parts.append(token.value)

        if token.value in OPENERS:
            brackets.append(token.value)
        elif token.value in CLOSERS and brackets:
            brackets.pop()

        prev2, prev = prev, token

    return ''.join(parts)


def split_lines(tokens: Iterable[Token]) -> List[List[Token]]:
    """Group tokens into output lines.

    A token whose value ends in a newline (an emitted comment) closes its
    line and absorbs an immediately following NEWLINE token.
    """
    lines: List[List[Token]] = []
    current: List[Token] = []
    absorb = False

    for token in tokens:
        if token.type == TokenType.EOF:
            break
        if token.type == TokenType.NEWLINE:
            if not absorb:
                lines.append(current)
                current = []
            absorb = False
            continue

        absorb = False
        if token.value.endswith('\n'):
            current.append(Token(token.type, token.value.rstrip('\n'),
                                 token.line, token.column))
            lines.append(current)
            current = []
            absorb = True
        else:
            current.append(token)

    if current:
        lines.append(current)
    return lines


def emit(tokens: Iterable[Token]) -> str:
    """Render *tokens* as formatted source text.

    Raises:
        EmitterError: If the token stream is not well formed.
    """
    tokens = list(tokens)
    check(tokens)

    output: List[str] = []
    # Line index on which each open bracket was opened; indentation counts
    # distinct lines so that "f(func() {" indents its body once.
    open_lines: List[int] = []

    for index, line in enumerate(split_lines(tokens)):
        if not line:
            if output and output[-1] != '':
                output.append('')
            continue

        start = 0
        while start < len(line) and line[start].value in CLOSERS:
            if open_lines:
                open_lines.pop()
            start += 1
        indent = len(set(open_lines))

        for token in line[start:]:
            if token.value in OPENERS:
                open_lines.append(index)
            elif token.value in CLOSERS and open_lines:
                open_lines.pop()

        output.append('\t' * indent + render_line(line))

    while output and output[-1] == '':
        output.pop()
    if not output:
        return ''
    return '\n'.join(output) + '\n'
