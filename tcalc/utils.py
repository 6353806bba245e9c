import enum
from typing import Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


class LookaheadBuffer(Generic[T]):
    """Pull items from an iterable with unbounded LIFO pushback"""

    def __init__(self, items: Iterable[T]) -> None:
        self._items: Iterator[T] = iter(items)
        self._pushed: list[T] = []

    def pop(self) -> Optional[T]:
        if self._pushed:
            return self._pushed.pop()
        return next(self._items, None)

    def push(self, item: T) -> None:
        self._pushed.append(item)
