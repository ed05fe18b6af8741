"""gopp Lexical Analyzer

Tokenizes Go source code into a stream of tokens for the preprocessor.
Comments are kept as tokens (with their ``//`` or ``/*`` opener) because
gopp directives live inside them.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import List, Optional


class TokenType(Enum):
    # Names
    IDENTIFIER = auto()
    KEYWORD = auto()

    # Literals
    INTEGER = auto()
    FLOAT = auto()
    IMAGINARY = auto()
    CHAR = auto()
    STRING = auto()

    # Punctuation
    OPERATOR = auto()
    DELIMITER = auto()

    # Special
    COMMENT = auto()
    NEWLINE = auto()
    EOF = auto()


LITERAL_TYPES = frozenset({
    TokenType.INTEGER,
    TokenType.FLOAT,
    TokenType.IMAGINARY,
    TokenType.CHAR,
    TokenType.STRING,
})


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int

    @property
    def position(self) -> str:
        return f"{self.line}:{self.column}"

    def __str__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


DIGITS = "0123456789"


def is_digit(char: Optional[str]) -> bool:
    """ASCII decimal digit only; Go does not accept other Unicode digits here."""
    return bool(char) and char in DIGITS


class LexerError(Exception):
    """Exception raised for lexical analysis errors."""
    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"Lexer error at {line}:{column}: {message}")
        self.line = line
        self.column = column


class Lexer:
    """Go Lexical Analyzer"""

    KEYWORDS = frozenset({
        'break', 'case', 'chan', 'const', 'continue', 'default', 'defer',
        'else', 'fallthrough', 'for', 'func', 'go', 'goto', 'if', 'import',
        'interface', 'map', 'package', 'range', 'return', 'select', 'struct',
        'switch', 'type', 'var',
    })

    # Longest first so that '<<=' wins over '<<' and '<'.
    OPERATORS = (
        '<<=', '>>=', '&^=', '...',
        '&&', '||', '<-', '++', '--', '==', '!=', '<=', '>=', ':=',
        '+=', '-=', '*=', '/=', '%=', '&=', '|=', '^=', '<<', '>>', '&^',
        '+', '-', '*', '/', '%', '&', '|', '^', '<', '>', '=', '!', '~',
    )

    DELIMITERS = frozenset('()[]{},;.:')

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def error(self, message: str, line: Optional[int] = None,
              column: Optional[int] = None) -> None:
        """Raise a lexer error at the given (or current) position."""
        raise LexerError(message,
                         self.line if line is None else line,
                         self.column if column is None else column)

    def peek(self, offset: int = 0) -> Optional[str]:
        """Look ahead at character without consuming it."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> Optional[str]:
        """Consume and return the current character."""
        if self.pos >= len(self.text):
            return None

        char = self.text[self.pos]
        self.pos += 1

        if char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return char

    def skip_whitespace(self) -> None:
        """Skip whitespace characters except newlines."""
        while self.peek() and self.peek() in ' \t\r\f\v':
            self.advance()

    def _read_digits(self, digits: str) -> str:
        value = ""
        while self.peek() and (self.peek().lower() in digits or self.peek() == '_'):
            value += self.advance()
        return value

    def _read_exponent(self, markers: str) -> str:
        value = ""
        if self.peek() and self.peek() in markers:
            value += self.advance()
            if self.peek() in ('+', '-'):
                value += self.advance()
            exponent = self._read_digits('0123456789')
            if not exponent:
                self.error("Exponent has no digits")
            value += exponent
        return value

    def read_number(self) -> Token:
        """Read an integer, floating point or imaginary literal."""
        start_pos = (self.line, self.column)
        token_type = TokenType.INTEGER
        value = ""

        prefix = (self.peek() or '') + (self.peek(1) or '').lower()
        if prefix == '0x':
            value += self.advance() + self.advance()
            value += self._read_digits('0123456789abcdef')
            if self.peek() == '.':
                token_type = TokenType.FLOAT
                value += self.advance()
                value += self._read_digits('0123456789abcdef')
            if self.peek() and self.peek() in 'pP':
                token_type = TokenType.FLOAT
                value += self._read_exponent('pP')
            if value.lower() in ('0x', '0x.'):
                self.error("Invalid hexadecimal number", *start_pos)
        elif prefix in ('0o', '0b'):
            value += self.advance() + self.advance()
            digits = self._read_digits('01234567' if prefix == '0o' else '01')
            if not digits:
                self.error("Invalid integer literal", *start_pos)
            value += digits
        else:
            value += self._read_digits('0123456789')
            if self.peek() == '.' and self.peek(1) != '.':
                token_type = TokenType.FLOAT
                value += self.advance()
                value += self._read_digits('0123456789')
            if self.peek() and self.peek() in 'eE':
                token_type = TokenType.FLOAT
                value += self._read_exponent('eE')

        if self.peek() == 'i':
            token_type = TokenType.IMAGINARY
            value += self.advance()

        return Token(token_type, value, start_pos[0], start_pos[1])

    def read_identifier(self) -> Token:
        """Read an identifier or keyword."""
        start_pos = (self.line, self.column)
        value = ""

        while (self.peek() and
               (self.peek().isalnum() or self.peek() == '_')):
            value += self.advance()

        token_type = TokenType.KEYWORD if value in self.KEYWORDS else TokenType.IDENTIFIER
        return Token(token_type, value, start_pos[0], start_pos[1])

    def read_quoted(self, quote: str, token_type: TokenType, what: str) -> Token:
        """Read a rune or interpreted string literal, escapes kept verbatim."""
        start_pos = (self.line, self.column)
        value = self.advance()  # opening quote

        while True:
            char = self.peek()
            if char is None or char == '\n':
                self.error(f"Unterminated {what} literal", *start_pos)
            value += self.advance()
            if char == '\\':
                if self.peek() is None or self.peek() == '\n':
                    self.error("Unterminated escape sequence", *start_pos)
                value += self.advance()
            elif char == quote:
                break

        if token_type == TokenType.CHAR and len(value) == 2:
            self.error("Empty rune literal", *start_pos)

        return Token(token_type, value, start_pos[0], start_pos[1])

    def read_raw_string(self) -> Token:
        """Read a backquoted raw string, which may span lines."""
        start_pos = (self.line, self.column)
        value = self.advance()

        while True:
            char = self.advance()
            if char is None:
                self.error("Unterminated raw string literal", *start_pos)
            if char == '\r':
                continue  # carriage returns are discarded from raw strings
            value += char
            if char == '`':
                break

        return Token(TokenType.STRING, value, start_pos[0], start_pos[1])

    def read_comment(self) -> Token:
        """Read a single-line comment, keeping the '//' opener."""
        start_pos = (self.line, self.column)
        value = ""

        while self.peek() and self.peek() != '\n':
            value += self.advance()

        return Token(TokenType.COMMENT, value.rstrip('\r'), start_pos[0], start_pos[1])

    def read_block_comment(self) -> Token:
        """Read a /* ... */ comment."""
        start_pos = (self.line, self.column)
        value = self.advance() + self.advance()

        while not (self.peek() == '*' and self.peek(1) == '/'):
            if self.peek() is None:
                self.error("Unterminated block comment", *start_pos)
            value += self.advance()

        value += self.advance() + self.advance()
        return Token(TokenType.COMMENT, value, start_pos[0], start_pos[1])

    def read_operator(self) -> Optional[Token]:
        for op in self.OPERATORS:
            if self.text.startswith(op, self.pos):
                token = Token(TokenType.OPERATOR, op, self.line, self.column)
                for _ in op:
                    self.advance()
                return token
        return None

    def tokenize(self) -> List[Token]:
        """Tokenize the entire input text."""
        while self.pos < len(self.text):
            self.skip_whitespace()

            if self.pos >= len(self.text):
                break

            char = self.peek()

            # Newlines
            if char == '\n':
                token = Token(TokenType.NEWLINE, char, self.line, self.column)
                self.tokens.append(token)
                self.advance()
                continue

            # Numbers, including '.5'
            if is_digit(char) or (char == '.' and is_digit(self.peek(1))):
                self.tokens.append(self.read_number())
                continue

            # Identifiers and keywords
            if char.isalpha() or char == '_':
                self.tokens.append(self.read_identifier())
                continue

            if char == '\'':
                self.tokens.append(self.read_quoted('\'', TokenType.CHAR, "rune"))
                continue

            if char == '"':
                self.tokens.append(self.read_quoted('"', TokenType.STRING, "string"))
                continue

            if char == '`':
                self.tokens.append(self.read_raw_string())
                continue

            # Comments
            if char == '/' and self.peek(1) == '/':
                self.tokens.append(self.read_comment())
                continue

            if char == '/' and self.peek(1) == '*':
                self.tokens.append(self.read_block_comment())
                continue

            # '...' must be tried before the '.' delimiter
            token = self.read_operator()
            if token is not None:
                self.tokens.append(token)
                continue

            if char in self.DELIMITERS:
                token = Token(TokenType.DELIMITER, char, self.line, self.column)
                self.tokens.append(token)
                self.advance()
                continue

            # Unknown character
            self.error(f"Unexpected character: '{char}'")

        # Add EOF token
        self.tokens.append(Token(TokenType.EOF, "", self.line, self.column))
        return self.tokens


def tokenize(text: str) -> List[Token]:
    """Convenience function to tokenize Go source code."""
    lexer = Lexer(text)
    return lexer.tokenize()
