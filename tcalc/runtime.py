import enum
import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from tcalc.ast_nodes import (
    Assignment,
    BinaryOperation,
    BinaryOperator,
    Call,
    DeleteVar,
    Expression,
    Literal,
    Statement,
    UnaryOperation,
    UnaryOperator,
    Variable,
)
from tcalc.builtins import BUILTIN_CONSTANTS, BUILTIN_FUNCS
from tcalc.utils import PrintableEnum

logger = logging.getLogger("tcalc.runtime")

ANS = "ans"


class CalcRuntimeError(Exception):
    pass


@dataclass
class UndefinedVariable(CalcRuntimeError):
    name: str

    def __str__(self) -> str:
        return f'Variable "{self.name}" is undefined'


@dataclass
class UndefinedFunction(CalcRuntimeError):
    name: str

    def __str__(self) -> str:
        return f'Function "{self.name}" is undefined'


class ArityKind(PrintableEnum):
    FEW = enum.auto()
    MANY = enum.auto()


@dataclass
class ArityMismatch(CalcRuntimeError):
    name: str
    expected: int
    found: int
    kind: ArityKind

    def __str__(self) -> str:
        return (
            f"Call to {self.name}() has too {self.kind.name.lower()} parameters; "
            f"expected {self.expected} but found {self.found}."
        )


@dataclass
class DivideByZero(CalcRuntimeError):
    def __str__(self) -> str:
        return "Cannot divide by zero"


@dataclass
class ExpressionTooDeep(CalcRuntimeError):
    def __str__(self) -> str:
        return "Expression is nested too deeply"


class Scope:
    """Stack of variable layers.

    Layer 0 holds the builtin constants and is read-only. Lookups go from the
    innermost layer outwards, assignments always land in the innermost layer.
    """

    def __init__(self, builtins: Mapping[str, float]) -> None:
        self._builtins: Mapping[str, float] = MappingProxyType(dict(builtins))
        self._layers: list[dict[str, float]] = [dict()]

    def push(self) -> None:
        self._layers.append(dict())

    def pop(self) -> dict[str, float]:
        if len(self._layers) == 1:
            raise IndexError("The outermost user scope cannot be popped")
        return self._layers.pop()

    def lookup(self, name: str) -> float:
        for layer in reversed(self._layers):
            if name in layer:
                return layer[name]
        if name in self._builtins:
            return self._builtins[name]
        raise UndefinedVariable(name)

    def assign(self, name: str, value: float) -> None:
        self._layers[-1][name] = value

    def delete(self, name: str) -> None:
        for layer in reversed(self._layers):
            if name in layer:
                del layer[name]
                return
        raise UndefinedVariable(name)

    def snapshot(self) -> list[dict[str, float]]:
        return [dict(layer) for layer in self._layers]

    def restore(self, layers: list[dict[str, float]]) -> None:
        self._layers = layers


I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


def to_i64(value: float) -> int:
    """Truncates towards zero, saturating at the i64 bounds; NaN becomes 0"""
    if math.isnan(value):
        return 0
    if value >= 2.0**63:
        return I64_MAX
    if value <= -(2.0**63):
        return I64_MIN
    return int(value)


def wrap_i64(value: int) -> int:
    value &= 2**64 - 1
    return value - 2**64 if value > I64_MAX else value


def _is_odd_integer(value: float) -> bool:
    return value.is_integer() and math.fmod(value, 2.0) != 0.0


def _divide(a: float, b: float) -> float:
    if b == 0.0:
        raise DivideByZero()
    return a / b


def _modulo(a: float, b: float) -> float:
    if b == 0.0:
        raise DivideByZero()
    return math.fmod(a, b)


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
    except ValueError:
        # math.pow raises where IEEE pow yields an infinity or NaN
        if a == 0.0:
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        return math.nan


def _bitwise(impl: Callable[[int, int], int]) -> Callable[[float, float], float]:
    return lambda a, b: float(wrap_i64(impl(to_i64(a), to_i64(b))))


BinaryOperationImpl = Callable[[float, float], float]

BINARY_OPERATION_IMPLS: dict[BinaryOperator, BinaryOperationImpl] = {
    BinaryOperator.PLUS: lambda a, b: a + b,
    BinaryOperator.MINUS: lambda a, b: a - b,
    BinaryOperator.MULTIPLY: lambda a, b: a * b,
    BinaryOperator.DIVIDE: _divide,
    BinaryOperator.MODULO: _modulo,
    BinaryOperator.EXPONENT: _power,
    BinaryOperator.BIT_AND: _bitwise(lambda a, b: a & b),
    BinaryOperator.BIT_OR: _bitwise(lambda a, b: a | b),
    BinaryOperator.BIT_XOR: _bitwise(lambda a, b: a ^ b),
    # shift amounts wrap modulo 64
    BinaryOperator.LEFT_SHIFT: _bitwise(lambda a, b: a << (b & 63)),
    BinaryOperator.RIGHT_SHIFT: _bitwise(lambda a, b: a >> (b & 63)),
}

UnaryOperationImpl = Callable[[float], float]

UNARY_OPERATION_IMPLS: dict[UnaryOperator, UnaryOperationImpl] = {
    UnaryOperator.NEGATE: lambda a: -a,
    UnaryOperator.NOT: lambda a: float(~to_i64(a)),
}


class Runner:
    """Evaluates parsed lines against a scope that lives as long as the runner.

    A runner is not safe to share between sessions; use one per session.
    """

    def __init__(self) -> None:
        self.scope = Scope(BUILTIN_CONSTANTS)

    def run(self, node: Statement | Expression) -> Optional[float]:
        if isinstance(node, DeleteVar):
            self.run_statement(node)
            return None
        return self.run_expression(node)

    def run_expression(self, expression: Expression) -> float:
        """Evaluates an expression and binds the result to ans.

        A failed evaluation leaves the scope as it was before the call, including
        assignments made by sub-expressions that had already completed.
        """
        saved = self.scope.snapshot()
        try:
            value = self.evaluate_expression(expression)
        except RecursionError:
            self.scope.restore(saved)
            raise ExpressionTooDeep() from None
        except CalcRuntimeError:
            self.scope.restore(saved)
            raise
        self.scope.assign(ANS, value)
        return value

    def run_statement(self, statement: Statement) -> None:
        if isinstance(statement, DeleteVar):
            self.scope.delete(statement.name)
            logger.debug("deleted %s", statement.name)
        else:
            raise RuntimeError(f"Unexpected statement type: {statement}")

    def evaluate_expression(self, expression: Expression) -> float:
        if isinstance(expression, Literal):
            return expression.value
        elif isinstance(expression, Variable):
            return self.scope.lookup(expression.name)
        elif isinstance(expression, UnaryOperation):
            return self.evaluate_unary(expression)
        elif isinstance(expression, BinaryOperation):
            return self.evaluate_binary(expression)
        elif isinstance(expression, Assignment):
            value = self.evaluate_expression(expression.value)
            self.scope.assign(expression.name, value)
            logger.debug("%s = %s", expression.name, value)
            return value
        elif isinstance(expression, Call):
            return self.call(expression)
        else:
            raise RuntimeError(f"Unexpected expression type: {expression}")

    def evaluate_unary(self, expression: UnaryOperation) -> float:
        operators: list[UnaryOperator] = []
        operand: Expression = expression
        while isinstance(operand, UnaryOperation):
            operators.append(operand.operator)
            operand = operand.operand

        value = self.evaluate_expression(operand)
        for operator in reversed(operators):
            value = UNARY_OPERATION_IMPLS[operator](value)
        return value

    def evaluate_binary(self, expression: BinaryOperation) -> float:
        """Folds a left-deep chain such as 1 + 2 + 3 without recursing into the left operands"""
        chain: list[BinaryOperation] = []
        left: Expression = expression
        while isinstance(left, BinaryOperation):
            chain.append(left)
            left = left.left

        value = self.evaluate_expression(left)
        for operation in reversed(chain):
            right = self.evaluate_expression(operation.right)
            value = BINARY_OPERATION_IMPLS[operation.operator](value, right)
        return value

    def call(self, call: Call) -> float:
        func = BUILTIN_FUNCS.get(call.name)
        if func is None:
            raise UndefinedFunction(call.name)

        found = len(call.params)
        if found != func.arity:
            kind = ArityKind.FEW if found < func.arity else ArityKind.MANY
            raise ArityMismatch(name=call.name, expected=func.arity, found=found, kind=kind)

        args = [self.evaluate_expression(param) for param in call.params]
        return func(*args)
