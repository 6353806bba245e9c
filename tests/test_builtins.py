import math

import pytest

from tcalc.builtins import BUILTIN_CONSTANTS, BUILTIN_FUNCS


def test_builtin_funcs_are_registered() -> None:
    assert sorted(BUILTIN_FUNCS) == ["abs", "ceil", "floor", "round"]
    assert all(func.arity == 1 for func in BUILTIN_FUNCS.values())


def test_builtin_constants() -> None:
    assert BUILTIN_CONSTANTS == {"e": math.e, "pi": math.pi, "phi": (1 + math.sqrt(5)) / 2}


@pytest.mark.parametrize(
    "name, arg, expected",
    [
        pytest.param("abs", -0.5, 0.5),
        pytest.param("ceil", -1.5, -1.0),
        pytest.param("ceil", math.inf, math.inf),
        pytest.param("floor", 1.5, 1.0),
        pytest.param("floor", -math.inf, -math.inf),
        pytest.param("round", 0.5, 1.0),
        pytest.param("round", 1.5, 2.0),
        pytest.param("round", 2.5, 3.0),
        pytest.param("round", -0.4, -0.0),
        pytest.param("round", 0.49999999999999994, 0.0),
    ],
)
def test_builtin_func(name: str, arg: float, expected: float) -> None:
    assert BUILTIN_FUNCS[name](arg) == expected


def test_builtin_func_keeps_nan() -> None:
    assert math.isnan(BUILTIN_FUNCS["round"](math.nan))
