"""
Character scanner for symcalc expressions.

The lexer only classifies the first character of a lexeme. Identifiers and
numerals are assembled by the parser, which pulls further characters through
peek_char() and next_char().
"""

import string
from enum import Enum

from .errors import ParseError

WHITESPACE = " \t\n\r"
LETTERS = string.ascii_letters
DIGITS = string.digits


class TokenType(Enum):
    """Token classes of the expression grammar."""

    END = "end of input"
    POWER = "^"
    MULTIPLY = "*"
    DIVIDE = "/"
    SUBTRACT = "-"
    ADD = "+"
    OPEN = "("
    CLOSE = ")"
    IDENTIFIER = "identifier"
    DIGIT = "digit"
    COMMA = ","
    DEFINE = "="


# Single character tokens
PUNCTUATION = {
    token.value: token
    for token in TokenType
    if len(token.value) == 1
}


class Lexer:
    """
    One-token lookahead scanner over an input string.

    After advance(), `token` holds the class of the next lexeme, `char` its
    first character, `start` the index of that character and `pos` the
    index just past it.

        lexer = Lexer("x + 1")
        lexer.advance()   # TokenType.IDENTIFIER, lexer.char == "x"
        lexer.advance()   # TokenType.ADD
        lexer.advance()   # TokenType.DIGIT, lexer.char == "1"
        lexer.advance()   # TokenType.END
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.start = 0
        self.char = ""
        self.token = TokenType.END

    def advance(self) -> TokenType:
        """Skip whitespace and classify the next character."""
        while self.pos < len(self.text):
            char = self.text[self.pos]
            self.pos += 1
            if char in WHITESPACE:
                continue

            self.start = self.pos - 1
            self.char = char
            if char in LETTERS:
                self.token = TokenType.IDENTIFIER
            elif char in DIGITS:
                self.token = TokenType.DIGIT
            elif char in PUNCTUATION:
                self.token = PUNCTUATION[char]
            else:
                raise ParseError(f"Unidentified character: {char}", self.start)
            return self.token

        self.start = len(self.text)
        self.char = ""
        self.token = TokenType.END
        return self.token

    def peek_char(self) -> str:
        """The character at the cursor, or "" at the end of input."""
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def next_char(self) -> str:
        """Consume and return the character at the cursor."""
        char = self.peek_char()
        if char:
            self.pos += 1
        return char

    def __repr__(self) -> str:
        return f"Lexer({self.text!r}, pos={self.pos}, token={self.token.name})"
