from tcalc.ast_nodes import Ast, DeleteVar, Exit, Expression
from tcalc.parser import ParserError, parse
from tcalc.runtime import (
    ArityKind,
    ArityMismatch,
    CalcRuntimeError,
    DivideByZero,
    ExpressionTooDeep,
    Runner,
    UndefinedFunction,
    UndefinedVariable,
)
from tcalc.tokenizer import TokenizerError, tokenize

__version__ = "0.1.0"

__all__ = [
    "ArityKind",
    "ArityMismatch",
    "Ast",
    "CalcRuntimeError",
    "DeleteVar",
    "DivideByZero",
    "Exit",
    "ExpressionTooDeep",
    "Expression",
    "ParserError",
    "Runner",
    "TokenizerError",
    "UndefinedFunction",
    "UndefinedVariable",
    "parse",
    "tokenize",
]
