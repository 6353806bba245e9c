import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from tcalc.utils import LookaheadBuffer, PrintableEnum

logger = logging.getLogger("tcalc.tokenizer")


@dataclass
class TokenizerError(Exception):
    errmsg: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.errmsg} (line {self.line}, col {self.column})"


Report = Callable[[Exception], None]


def log_diagnostic(error: Exception) -> None:
    logger.error("%s", error)


class TokenType(PrintableEnum):
    NUMBER = enum.auto()
    IDENTIFIER = enum.auto()
    NEWLINE = enum.auto()
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()
    COMMA = enum.auto()
    EQUAL = enum.auto()
    BANG = enum.auto()
    PLUS = enum.auto()
    PLUS_EQUAL = enum.auto()
    PLUS_X2 = enum.auto()
    MINUS = enum.auto()
    MINUS_EQUAL = enum.auto()
    MINUS_X2 = enum.auto()
    STAR = enum.auto()
    STAR_EQUAL = enum.auto()
    STAR_X2 = enum.auto()
    STAR_X2_EQUAL = enum.auto()
    SLASH = enum.auto()
    SLASH_EQUAL = enum.auto()
    PERCENT = enum.auto()
    PERCENT_EQUAL = enum.auto()
    CARET = enum.auto()
    CARET_EQUAL = enum.auto()
    AMPERSAND = enum.auto()
    AMPERSAND_EQUAL = enum.auto()
    PIPE = enum.auto()
    PIPE_EQUAL = enum.auto()
    LEFT_ANGLE_BRACKET_X2 = enum.auto()
    LEFT_ANGLE_BRACKET_X2_EQUAL = enum.auto()
    RIGHT_ANGLE_BRACKET_X2 = enum.auto()
    RIGHT_ANGLE_BRACKET_X2_EQUAL = enum.auto()


@dataclass
class Token:
    type: TokenType
    lexeme: str
    line: int = 1
    column: int = 1
    length: int = 1
    prefix: str = ""

    def __str__(self) -> str:
        if self.type is TokenType.NEWLINE:
            return f"<{self.type}>"
        return f"<{self.type}>{self.prefix}{self.lexeme}"


SINGLE_CHAR_TOKENS = {
    "(": TokenType.BRACKET_OPEN,
    ")": TokenType.BRACKET_CLOSE,
    ",": TokenType.COMMA,
    "=": TokenType.EQUAL,
    "!": TokenType.BANG,
}

# scanned greedily: the longest lexeme in this table wins
OPERATOR_TOKENS = {
    "+": TokenType.PLUS,
    "+=": TokenType.PLUS_EQUAL,
    "++": TokenType.PLUS_X2,
    "-": TokenType.MINUS,
    "-=": TokenType.MINUS_EQUAL,
    "--": TokenType.MINUS_X2,
    "*": TokenType.STAR,
    "*=": TokenType.STAR_EQUAL,
    "**": TokenType.STAR_X2,
    "**=": TokenType.STAR_X2_EQUAL,
    "/": TokenType.SLASH,
    "/=": TokenType.SLASH_EQUAL,
    "%": TokenType.PERCENT,
    "%=": TokenType.PERCENT_EQUAL,
    "^": TokenType.CARET,
    "^=": TokenType.CARET_EQUAL,
    "&": TokenType.AMPERSAND,
    "&=": TokenType.AMPERSAND_EQUAL,
    "|": TokenType.PIPE,
    "|=": TokenType.PIPE_EQUAL,
    "<<": TokenType.LEFT_ANGLE_BRACKET_X2,
    "<<=": TokenType.LEFT_ANGLE_BRACKET_X2_EQUAL,
    ">>": TokenType.RIGHT_ANGLE_BRACKET_X2,
    ">>=": TokenType.RIGHT_ANGLE_BRACKET_X2_EQUAL,
}

# characters accepted in a number literal, by radix prefix; "_" is a separator
NUMBER_DIGITS = {
    "": "0123456789._",
    "0b": "01_",
    "0o": "01234567_",
    "0d": "0123456789._",
    "0x": "0123456789abcdefABCDEF_",
}

RADIXES = {"": 10, "0b": 2, "0o": 8, "0d": 10, "0x": 16}


def _is_valid_identifier_start(c: str) -> bool:
    return c.isalpha() or c == "_"


def _is_valid_in_identifier(c: str) -> bool:
    return c.isalnum() or c == "_"


def _is_valid_number_start(c: str) -> bool:
    return c in "0123456789."


class Scanner:
    """Turns source text into tokens, one per scan() call.

    scan() returns None both at the end of input and after a scan error;
    `exhausted` and `failed` tell the two apart. Iterating a scanner stops at
    whichever comes first.
    """

    def __init__(self, code: str, report: Optional[Report] = None) -> None:
        self._chars: LookaheadBuffer[str] = LookaheadBuffer(code)
        self._report = report or log_diagnostic
        self.line = 1
        self.column = 1
        self.failed = False
        self.exhausted = False

    def __iter__(self) -> Iterator[Token]:
        while (token := self.scan()) is not None:
            yield token

    def scan(self) -> Optional[Token]:
        c = self._get_char()
        while c is not None and c != "\n" and c.isspace():
            c = self._get_char()

        if c is None:
            self.exhausted = True
            return None

        start = self.column - 1
        if c == "\n":
            token = self._new_token(TokenType.NEWLINE, c, start)
            self.line += 1
            self.column = 1
            return token
        elif c in SINGLE_CHAR_TOKENS:
            return self._new_token(SINGLE_CHAR_TOKENS[c], c, start)
        elif _is_valid_number_start(c):
            self._put_char(c)
            return self._scan_number(start)
        elif _is_valid_identifier_start(c):
            self._put_char(c)
            return self._scan_identifier(start)
        elif any(op.startswith(c) for op in OPERATOR_TOKENS):
            return self._scan_operator(c, start)
        else:
            self._error(f"Unexpected character {c!r}", column=start)
            return None

    def _get_char(self) -> Optional[str]:
        c = self._chars.pop()
        if c is not None:
            self.column += 1
        return c

    def _put_char(self, c: str) -> None:
        self.column -= 1
        self._chars.push(c)

    def _consume_char_of(self, chars: str) -> Optional[str]:
        c = self._get_char()
        if c is None:
            return None
        if c not in chars:
            self._put_char(c)
            return None
        return c

    def _error(self, errmsg: str, column: int) -> None:
        self.failed = True
        self._report(TokenizerError(errmsg, line=self.line, column=column))

    def _new_token(self, type_: TokenType, lexeme: str, start: int, prefix: str = "") -> Token:
        token = Token(
            type=type_,
            lexeme=lexeme,
            line=self.line,
            column=start,
            length=self.column - start,
            prefix=prefix,
        )
        logger.debug("%s @%d:%d, len %d", token, token.line, token.column, token.length)
        return token

    def _scan_operator(self, first: str, start: int) -> Optional[Token]:
        lexeme = first
        while True:
            c = self._get_char()
            if c is None:
                break
            if not any(op.startswith(lexeme + c) for op in OPERATOR_TOKENS):
                self._put_char(c)
                break
            lexeme += c

        if lexeme in OPERATOR_TOKENS:
            return self._new_token(OPERATOR_TOKENS[lexeme], lexeme, start)

        # only "<" and ">" have no single-character token of their own
        expected = next(op[len(lexeme)] for op in OPERATOR_TOKENS if op.startswith(lexeme) and op != lexeme)
        if c is None:
            self._error("Unexpected end of input", column=self.column)
        else:
            self._error(f"Expected {expected!r} but found {c!r} instead", column=self.column)
        return None

    def _scan_number(self, start: int) -> Token:
        prefix = ""
        if self._consume_char_of("0"):
            c = self._get_char()
            if c is not None and "0" + c in NUMBER_DIGITS:
                prefix = "0" + c
            else:
                if c is not None:
                    self._put_char(c)
                self._put_char("0")

        digits = NUMBER_DIGITS[prefix]
        value = ""
        while (c := self._consume_char_of(digits)) is not None:
            if c == ".":
                digits = digits.replace(".", "")
            if c != "_":
                value += c

        return self._new_token(TokenType.NUMBER, value, start, prefix=prefix)

    def _scan_identifier(self, start: int) -> Token:
        name = ""
        while True:
            c = self._get_char()
            if c is None:
                break
            if not _is_valid_in_identifier(c):
                self._put_char(c)
                break
            name += c
        return self._new_token(TokenType.IDENTIFIER, name, start)


def tokenize(code: str, report: Optional[Report] = None) -> list[Token]:
    """Scans all of `code`, skipping over characters that fail to scan"""
    scanner = Scanner(code, report)
    tokens: list[Token] = []
    while not scanner.exhausted:
        token = scanner.scan()
        if token is not None:
            tokens.append(token)
    return tokens
