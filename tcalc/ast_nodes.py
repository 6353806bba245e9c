import enum
from dataclasses import dataclass, field

from tcalc.utils import PrintableEnum


class BinaryOperator(PrintableEnum):
    PLUS = enum.auto()
    MINUS = enum.auto()
    MULTIPLY = enum.auto()
    DIVIDE = enum.auto()
    MODULO = enum.auto()
    EXPONENT = enum.auto()
    BIT_AND = enum.auto()
    BIT_OR = enum.auto()
    BIT_XOR = enum.auto()
    LEFT_SHIFT = enum.auto()
    RIGHT_SHIFT = enum.auto()


class UnaryOperator(PrintableEnum):
    NEGATE = enum.auto()
    NOT = enum.auto()


@dataclass
class Literal:
    value: float


@dataclass
class Variable:
    name: str


@dataclass
class UnaryOperation:
    operator: UnaryOperator
    operand: "Expression"


@dataclass
class BinaryOperation:
    left: "Expression"
    operator: BinaryOperator
    right: "Expression"


@dataclass
class Assignment:
    name: str
    value: "Expression"


@dataclass
class Call:
    name: str
    params: list["Expression"] = field(default_factory=list)


Expression = Literal | Variable | UnaryOperation | BinaryOperation | Assignment | Call


@dataclass
class Exit:
    pass


Command = Exit


@dataclass
class DeleteVar:
    name: str


Statement = DeleteVar

Ast = Command | Statement | Expression
