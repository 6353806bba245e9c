"""
tcalc command line interface

Usage:
    tcalc                       start an interactive session
    tcalc EXPRESSION [...]      evaluate each expression in turn
    tcalc -- -1                 expressions starting with "-" go after "--"
"""

import argparse
import logging
import math
from typing import Iterable, Optional

from tcalc import __version__
from tcalc.ast_nodes import Exit
from tcalc.config import Settings
from tcalc.parser import parse
from tcalc.runtime import CalcRuntimeError, Runner

logger = logging.getLogger("tcalc")


def format_value(value: float) -> str:
    if value == 0.0 and math.copysign(1.0, value) < 0:
        # int() would drop the sign
        return "-0"
    if value.is_integer():
        return str(int(value))
    return str(value)


def run_line(line: str, runner: Runner, result_prefix: str = "") -> bool:
    """Runs one line, printing its result; returns False once the line asks to exit"""
    ast = parse(line)
    if ast is None:
        return True
    if isinstance(ast, Exit):
        return False

    try:
        result = runner.run(ast)
    except CalcRuntimeError as e:
        print(e)
        return True

    if result is not None:
        print(result_prefix + format_value(result))
    return True


def run_lines(lines: Iterable[str], runner: Runner) -> None:
    """Runs every line; exit commands are ignored since there is no loop to leave"""
    for line in lines:
        run_line(line, runner)


def repl(runner: Runner, settings: Settings) -> None:
    while True:
        try:
            line = input(settings.prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line.strip():
            continue
        if not run_line(line, runner, result_prefix=settings.result_prefix):
            break


def main(argv: Optional[list[str]] = None) -> None:
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(message)s")

    parser = argparse.ArgumentParser(prog="tcalc", description="Terminal calculator")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("expressions", nargs="*", help="Expressions to evaluate; starts a REPL if none are given")
    args = parser.parse_args(argv)

    runner = Runner()
    if args.expressions:
        run_lines(args.expressions, runner)
    else:
        logger.debug("Starting REPL")
        repl(runner, settings)


if __name__ == "__main__":
    main()
