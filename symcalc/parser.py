"""
Recursive descent parser for symcalc expressions.

Grammar, loosest binding first:

    define          := expression ('=' expression)*
    expression      := ['+' | '-'] multiplication (('+' | '-') multiplication)*
    multiplication  := division ('*' division)*
    division        := power ('/' power)*
    power           := term ('^' term)*
    term            := '-' term
                     | identifier ['(' [expression (',' expression)*] ')']
                     | numeral
                     | '(' expression ')'

There are no subtraction or division nodes:

    x - y   ->  ADD(x, MULTIPLY(-1, y))
    x / y   ->  MULTIPLY(x, POWER(y, -1))
    1 / 3   ->  Fraction(1, 3)

Repeated '=' and '^' both associate to the left, so x^2^3 is (x^2)^3.

All upper-case identifiers name operators and must be registered. Other
identifiers are variables; a variable that is defined when the text is
parsed gets a substitution evaluator, so evaluating the tree replaces it
with its value.

Example:
    >>> from symcalc.parser import parse
    >>> tree = parse("x^2*3 + 1/(y-2)")
    >>> str(tree)
    'x^2*3+1/(y-2)'
"""

import logging
from typing import List, Optional

from .errors import ParseError, UnsupportedOperatorError
from .evaluator import Evaluator
from .expr import Expr, Integer, Double, Fraction, Symbol, Function, NEG_ONE, is_zero
from .lexer import Lexer, TokenType, LETTERS, DIGITS
from .registry import Registry, get_registry, is_operator_name

logger = logging.getLogger(__name__)


class Parser:
    """
    Parser bound to a registry.

    The registry is only read: operators are looked up and defined variables
    are recognized, nothing is bound until a DEFINE node is evaluated.
    """

    def __init__(self, registry: Optional[Registry] = None):
        self.registry = registry if registry is not None else get_registry()
        self.lexer: Optional[Lexer] = None

    def parse(self, text: str) -> Expr:
        """
        Parse text into an expression tree.

        Raises:
            ParseError: if the text is malformed or nested too deeply
            UnsupportedOperatorError: if an upper-case name is not registered
        """
        self.lexer = Lexer(text)
        self.lexer.advance()
        try:
            expr = self._parse_define()
        except RecursionError:
            raise ParseError("Expression nested too deeply", self.lexer.start) from None

        if self.lexer.token is TokenType.CLOSE:
            raise ParseError("Extra closing parenthesis", self.lexer.start)
        if self.lexer.token is not TokenType.END:
            raise ParseError(f"Unexpected {self.lexer.char!r}", self.lexer.start)

        logger.debug("Parsed %r as %r", text, expr)
        return expr

    def _operator(self, name: str) -> Evaluator:
        evaluator = self.registry.lookup_operator(name)
        if evaluator is None:
            raise UnsupportedOperatorError(name, self.lexer.start)
        return evaluator

    def _parse_define(self) -> Expr:
        expr = self._parse_expression()
        while self.lexer.token is TokenType.DEFINE:
            self.lexer.advance()
            expr = self._operator("DEFINE").create(expr, self._parse_expression())
        return expr

    def _parse_expression(self) -> Expr:
        negative = False
        if self.lexer.token is TokenType.ADD:
            self.lexer.advance()
        elif self.lexer.token is TokenType.SUBTRACT:
            negative = True
            self.lexer.advance()

        terms = [self._parse_multiplication(negative)]
        while self.lexer.token in (TokenType.ADD, TokenType.SUBTRACT):
            negative = self.lexer.token is TokenType.SUBTRACT
            self.lexer.advance()
            terms.append(self._parse_multiplication(negative))

        if len(terms) == 1:
            return terms[0]
        return self._operator("ADD").create(*terms)

    def _parse_multiplication(self, negative: bool = False) -> Expr:
        factors = [self._parse_division()]
        while self.lexer.token is TokenType.MULTIPLY:
            self.lexer.advance()
            factors.append(self._parse_division())

        if negative:
            first = factors[0]
            if isinstance(first, Integer):
                factors[0] = Integer(-first.value)
            elif isinstance(first, Fraction):
                factors[0] = Fraction(-first.numerator, first.denominator)
            else:
                factors.insert(0, NEG_ONE)

        if len(factors) == 1:
            return factors[0]
        return self._operator("MULTIPLY").create(*factors)

    def _parse_division(self) -> Expr:
        numerator = self._parse_power()
        if self.lexer.token is not TokenType.DIVIDE:
            return numerator

        factors = [numerator]
        denominators = []
        while self.lexer.token is TokenType.DIVIDE:
            position = self.lexer.start
            self.lexer.advance()
            denominator = self._parse_power()
            if is_zero(denominator):
                raise ParseError("Division by zero", position)
            denominators.append(denominator)

        if (len(denominators) == 1 and isinstance(numerator, Integer)
                and isinstance(denominators[0], Integer)):
            return Fraction(numerator.value, denominators[0].value)

        power = self._operator("POWER")
        factors.extend(power.create(denominator, NEG_ONE) for denominator in denominators)
        return self._operator("MULTIPLY").create(*factors)

    def _parse_power(self) -> Expr:
        expr = self._parse_term()
        while self.lexer.token is TokenType.POWER:
            self.lexer.advance()
            expr = self._operator("POWER").create(expr, self._parse_term())
        return expr

    def _parse_term(self) -> Expr:
        token = self.lexer.token

        if token is TokenType.SUBTRACT:
            self.lexer.advance()
            return self._operator("MULTIPLY").create(NEG_ONE, self._parse_term())

        if token is TokenType.IDENTIFIER:
            return self._parse_identifier()

        if token is TokenType.DIGIT:
            return self._parse_number()

        if token is TokenType.OPEN:
            position = self.lexer.start
            self.lexer.advance()
            expr = self._parse_expression()
            if self.lexer.token is not TokenType.CLOSE:
                raise ParseError("Missing closing parenthesis", position)
            self.lexer.advance()
            return expr

        if token is TokenType.CLOSE:
            raise ParseError("Extra closing parenthesis", self.lexer.start)
        if token is TokenType.END:
            raise ParseError("Unexpected end of input", self.lexer.start)
        raise ParseError(f"Unexpected {self.lexer.char!r}", self.lexer.start)

    def _take(self, allowed: str) -> str:
        """Consume the next character if it is one of allowed."""
        char = self.lexer.peek_char()
        if char and char in allowed:
            return self.lexer.next_char()
        return ""

    def _parse_identifier(self) -> Expr:
        start = self.lexer.start
        name = self.lexer.char
        while True:
            char = self._take(LETTERS + DIGITS)
            if not char:
                break
            name += char
        self.lexer.advance()

        if is_operator_name(name):
            evaluator = self.registry.lookup_operator(name)
            if evaluator is None:
                raise UnsupportedOperatorError(name, start)
            symbol = evaluator.symbol
        elif self.registry.is_variable_defined(name):
            symbol = Symbol(name, self.registry.get_variable_substitution_evaluator(name))
        else:
            symbol = Symbol(name)

        if self.lexer.token is TokenType.OPEN:
            if not is_operator_name(name):
                raise ParseError(f"{name} is not an operator and cannot be called", start)
            return self._parse_function(symbol)
        return symbol

    def _parse_number(self) -> Expr:
        start = self.lexer.start
        text = self.lexer.char
        has_point = False
        while True:
            char = self._take(DIGITS)
            if not char and not has_point:
                char = self._take(".")
                has_point = bool(char)
            if not char:
                break
            text += char
        self.lexer.advance()

        if has_point:
            return Double(float(text))
        try:
            return Integer(int(text))
        except ValueError:
            # int() refuses numerals longer than sys.get_int_max_str_digits()
            raise ParseError(f"Numeral too long: {text[:20]}...", start)

    def _parse_function(self, head: Symbol) -> Function:
        self.lexer.advance()
        params: List[Expr] = []
        if self.lexer.token is not TokenType.CLOSE:
            params.append(self._parse_expression())
            while self.lexer.token is TokenType.COMMA:
                self.lexer.advance()
                params.append(self._parse_expression())

        if self.lexer.token is not TokenType.CLOSE:
            raise ParseError("Expecting matching parenthesis", self.lexer.start)
        self.lexer.advance()
        return Function(head, tuple(params))


def parse(text: str, registry: Optional[Registry] = None) -> Expr:
    """Parse text with a fresh Parser over registry (the global one by default)."""
    return Parser(registry).parse(text)
