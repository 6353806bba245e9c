import logging
from dataclasses import dataclass
from typing import Optional

from tcalc.ast_nodes import (
    Assignment,
    Ast,
    BinaryOperation,
    BinaryOperator,
    Call,
    DeleteVar,
    Exit,
    Expression,
    Literal,
    UnaryOperation,
    UnaryOperator,
    Variable,
)
from tcalc.tokenizer import RADIXES, Report, Scanner, Token, TokenType
from tcalc.utils import LookaheadBuffer

logger = logging.getLogger("tcalc.parser")


@dataclass
class ParserError(Exception):
    errmsg: str
    token: Optional[Token] = None

    def __str__(self) -> str:
        if self.token is None:
            return self.errmsg
        return f"{self.errmsg} '{self.token}' (line {self.token.line}, col {self.token.column})"


def log_diagnostic(error: Exception) -> None:
    logger.error("%s", error)


EXIT_COMMANDS = {"exit", "quit"}
DELETE_STATEMENT = "delete"

TERMINATORS = {TokenType.NEWLINE}

# binary operator levels, loosest binding first
BINARY_OPERATOR_LEVELS: list[dict[TokenType, BinaryOperator]] = [
    {TokenType.PIPE: BinaryOperator.BIT_OR},
    {TokenType.CARET: BinaryOperator.BIT_XOR},
    {TokenType.AMPERSAND: BinaryOperator.BIT_AND},
    {
        TokenType.LEFT_ANGLE_BRACKET_X2: BinaryOperator.LEFT_SHIFT,
        TokenType.RIGHT_ANGLE_BRACKET_X2: BinaryOperator.RIGHT_SHIFT,
    },
    {TokenType.PLUS: BinaryOperator.PLUS, TokenType.MINUS: BinaryOperator.MINUS},
    {
        TokenType.STAR: BinaryOperator.MULTIPLY,
        TokenType.SLASH: BinaryOperator.DIVIDE,
        TokenType.PERCENT: BinaryOperator.MODULO,
    },
    {TokenType.STAR_X2: BinaryOperator.EXPONENT},
]

UNARY_OPERATORS = {
    TokenType.MINUS: UnaryOperator.NEGATE,
    TokenType.BANG: UnaryOperator.NOT,
}

COMPOUND_ASSIGNMENT_OPERATORS = {
    TokenType.PLUS_EQUAL: BinaryOperator.PLUS,
    TokenType.MINUS_EQUAL: BinaryOperator.MINUS,
    TokenType.STAR_EQUAL: BinaryOperator.MULTIPLY,
    TokenType.SLASH_EQUAL: BinaryOperator.DIVIDE,
    TokenType.PERCENT_EQUAL: BinaryOperator.MODULO,
    TokenType.STAR_X2_EQUAL: BinaryOperator.EXPONENT,
    TokenType.AMPERSAND_EQUAL: BinaryOperator.BIT_AND,
    TokenType.PIPE_EQUAL: BinaryOperator.BIT_OR,
    TokenType.CARET_EQUAL: BinaryOperator.BIT_XOR,
    TokenType.LEFT_ANGLE_BRACKET_X2_EQUAL: BinaryOperator.LEFT_SHIFT,
    TokenType.RIGHT_ANGLE_BRACKET_X2_EQUAL: BinaryOperator.RIGHT_SHIFT,
}

INCREMENT_OPERATORS = {
    TokenType.PLUS_X2: BinaryOperator.PLUS,
    TokenType.MINUS_X2: BinaryOperator.MINUS,
}

U64_LIMIT = 2**64


def parse_number(token: Token) -> float:
    """Converts a NUMBER token to its value; raises ValueError if it does not convert"""
    radix = RADIXES[token.prefix]
    if radix == 10:
        return float(token.lexeme)
    value = int(token.lexeme, radix)
    if value >= U64_LIMIT:
        raise ValueError(f"{token.prefix}{token.lexeme} does not fit in 64 bits")
    return float(value)


class Parser:
    """Recursive descent parser over a single logical line.

    Every parse_* method returns None on failure after reporting what went
    wrong; nothing is raised out of the parser.
    """

    def __init__(self, code: str, report: Optional[Report] = None) -> None:
        self._report = report or log_diagnostic
        self._scanner = Scanner(code, report=self._report)
        self._tokens: LookaheadBuffer[Token] = LookaheadBuffer(self._scanner)

    def get_token(self) -> Optional[Token]:
        return self._tokens.pop()

    def put_token(self, token: Token) -> None:
        self._tokens.push(token)

    def expect_token(self) -> Optional[Token]:
        token = self.get_token()
        # a scan error already reported why the tokens ran out
        if token is None and not self._scanner.failed:
            self._report(ParserError("Unexpected end of input"))
        return token

    def unexpected_token(self, token: Token) -> None:
        self._report(ParserError("Unexpected token", token=token))

    def nested_too_deeply(self) -> None:
        self._report(ParserError("Expression is nested too deeply"))

    def parse_ast(self) -> Optional[Ast]:
        ast: Optional[Ast] = self.parse_command()
        if ast is None:
            ast = self.parse_statement()
        if ast is None:
            ast = self.parse_expression()
        if ast is None:
            return None

        if not self.parse_terminator() or self._scanner.failed:
            return None
        return ast

    def parse_terminator(self) -> bool:
        token = self.get_token()
        if token is None or token.type in TERMINATORS:
            return True
        self.unexpected_token(token)
        return False

    def parse_command(self) -> Optional[Exit]:
        token = self.get_token()
        if token is None:
            return None
        if token.type is TokenType.IDENTIFIER and token.lexeme in EXIT_COMMANDS:
            following = self.get_token()
            if following is None or following.type in TERMINATORS:
                if following is not None:
                    self.put_token(following)
                return Exit()
            self.put_token(following)
        self.put_token(token)
        return None

    def parse_statement(self) -> Optional[DeleteVar]:
        token = self.get_token()
        if token is None:
            return None
        if token.type is TokenType.IDENTIFIER and token.lexeme == DELETE_STATEMENT:
            name = self.get_token()
            if name is not None and name.type is TokenType.IDENTIFIER:
                return DeleteVar(name.lexeme)
            if name is not None:
                self.put_token(name)
        self.put_token(token)
        return None

    def parse_expression(self) -> Optional[Expression]:
        return self.parse_assignment()

    def parse_assignment(self) -> Optional[Expression]:
        expr = self.parse_binary(level=0)
        if not isinstance(expr, Variable):
            return expr

        token = self.get_token()
        if token is None:
            return expr

        if token.type is TokenType.EQUAL:
            value = self.parse_assignment()
        elif token.type in COMPOUND_ASSIGNMENT_OPERATORS:
            right = self.parse_assignment()
            value = None if right is None else BinaryOperation(
                Variable(expr.name), COMPOUND_ASSIGNMENT_OPERATORS[token.type], right
            )
        elif token.type in INCREMENT_OPERATORS:
            value = BinaryOperation(Variable(expr.name), INCREMENT_OPERATORS[token.type], Literal(1.0))
        else:
            self.put_token(token)
            return expr

        if value is None:
            return None
        return Assignment(expr.name, value)

    def parse_binary(self, level: int) -> Optional[Expression]:
        if level == len(BINARY_OPERATOR_LEVELS):
            return self.parse_unary()

        operators = BINARY_OPERATOR_LEVELS[level]
        expr = self.parse_binary(level + 1)
        if expr is None:
            return None

        while (token := self.get_token()) is not None:
            operator = operators.get(token.type)
            if operator is None:
                self.put_token(token)
                break

            # a missing right operand keeps what was parsed so far
            right = self.parse_binary(level + 1)
            if right is None:
                break

            expr = BinaryOperation(expr, operator, right)

        return expr

    def parse_unary(self) -> Optional[Expression]:
        operators: list[UnaryOperator] = []
        while (token := self.get_token()) is not None and token.type in UNARY_OPERATORS:
            operators.append(UNARY_OPERATORS[token.type])
        if token is not None:
            self.put_token(token)

        expr = self.parse_primary()
        if expr is None:
            return None
        # innermost operator binds first
        for operator in reversed(operators):
            expr = UnaryOperation(operator, expr)
        return expr

    def parse_primary(self) -> Optional[Expression]:
        token = self.expect_token()
        if token is None:
            return None

        if token.type is TokenType.NUMBER:
            try:
                return Literal(parse_number(token))
            except ValueError:
                self._report(ParserError("Invalid number literal", token=token))
                return None
        elif token.type is TokenType.IDENTIFIER:
            following = self.get_token()
            if following is not None and following.type is TokenType.BRACKET_OPEN:
                params = self.parse_params()
                if params is None:
                    return None
                return Call(token.lexeme, params)
            if following is not None:
                self.put_token(following)
            return Variable(token.lexeme)
        elif token.type is TokenType.BRACKET_OPEN:
            expr = self.parse_expression()
            if expr is None:
                return None
            if not self.parse_closing_bracket():
                return None
            return expr
        else:
            self.unexpected_token(token)
            return None

    def parse_closing_bracket(self) -> bool:
        token = self.expect_token()
        if token is None:
            return False
        if token.type is not TokenType.BRACKET_CLOSE:
            self.unexpected_token(token)
            return False
        return True

    def parse_params(self) -> Optional[list[Expression]]:
        """Parses call arguments after the opening bracket, up to and including the closing one"""
        token = self.get_token()
        if token is not None and token.type is TokenType.BRACKET_CLOSE:
            return []
        if token is not None:
            self.put_token(token)

        params: list[Expression] = []
        while True:
            param = self.parse_expression()
            if param is None:
                return None
            params.append(param)

            token = self.expect_token()
            if token is None:
                return None
            if token.type is TokenType.BRACKET_CLOSE:
                return params
            if token.type is not TokenType.COMMA:
                self.unexpected_token(token)
                return None


def parse(code: str, report: Optional[Report] = None) -> Optional[Ast]:
    """Parses one line into an Ast, or returns None after reporting why it could not"""
    parser = Parser(code, report=report)
    try:
        return parser.parse_ast()
    except RecursionError:
        parser.nested_too_deeply()
        return None
