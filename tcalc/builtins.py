import math
from dataclasses import dataclass
from typing import Callable

BUILTIN_CONSTANTS: dict[str, float] = {
    "e": math.e,
    "pi": math.pi,
    "phi": (1 + math.sqrt(5)) / 2,
}


@dataclass
class BuiltinFunc:
    name: str
    arity: int
    fn: Callable[..., float]

    def __call__(self, *args: float) -> float:
        return self.fn(*args)


BUILTIN_FUNCS: dict[str, BuiltinFunc] = dict()


def register_builtin_func(name: str, arity: int = 1):
    def decorator(fn: Callable[..., float]) -> Callable[..., float]:
        BUILTIN_FUNCS[name] = BuiltinFunc(name=name, arity=arity, fn=fn)
        return fn

    return decorator


@register_builtin_func("abs")
def abs_(arg: float) -> float:
    return math.fabs(arg)


@register_builtin_func("ceil")
def ceil_(arg: float) -> float:
    if not math.isfinite(arg):
        return arg
    return float(math.ceil(arg))


@register_builtin_func("floor")
def floor_(arg: float) -> float:
    if not math.isfinite(arg):
        return arg
    return float(math.floor(arg))


@register_builtin_func("round")
def round_(arg: float) -> float:
    # halfway cases round away from zero, unlike the builtin round()
    if not math.isfinite(arg):
        return arg
    whole = math.floor(math.fabs(arg))
    if math.fabs(arg) - whole >= 0.5:
        whole += 1
    return math.copysign(float(whole), arg)
