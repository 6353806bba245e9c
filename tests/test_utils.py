from tcalc.utils import LookaheadBuffer, PrintableEnum


class Color(PrintableEnum):
    RED = 1


def test_printable_enum() -> None:
    assert str(Color.RED) == "RED"
    assert repr(Color.RED) == "RED"


def test_lookahead_buffer_pops_from_producer() -> None:
    buffer = LookaheadBuffer(iter("ab"))
    assert buffer.pop() == "a"
    assert buffer.pop() == "b"
    assert buffer.pop() is None
    assert buffer.pop() is None


def test_lookahead_buffer_pushback_is_lifo() -> None:
    buffer = LookaheadBuffer([1, 2, 3])
    first = buffer.pop()
    second = buffer.pop()
    buffer.push(second)
    buffer.push(first)
    assert [buffer.pop() for _ in range(4)] == [1, 2, 3, None]


def test_lookahead_buffer_pushback_after_exhaustion() -> None:
    buffer: LookaheadBuffer[str] = LookaheadBuffer([])
    assert buffer.pop() is None
    buffer.push("x")
    assert buffer.pop() == "x"
    assert buffer.pop() is None
