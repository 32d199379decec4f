"""Ordered choice groups: the binding of an XSD choice group.

A choice group is a run of optional child elements drawn from a fixed
vocabulary. Each child is a ``ChoicePair`` of a selector (which element kind)
and a value. The group keeps pairs in construction order; that order is the
emission order.
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any, NamedTuple, Protocol

from .errors import ArityMismatch, DuplicateSelector, TypeMismatch


class Selector(Protocol):
    """An element kind in a choice group vocabulary."""

    tag: str
    value_type: type
    repeatable: bool


class ChoicePair(NamedTuple):
    """A selector and the value emitted under its tag."""

    selector: Selector
    value: Any


def _is_selector(candidate: Any) -> bool:
    if not all(
        hasattr(candidate, attr) for attr in ("tag", "value_type", "repeatable")
    ):
        return False
    # selectors are tracked in a set for the duplicate check
    try:
        hash(candidate)
    except TypeError:
        return False
    return True


class OrderedChoiceGroup:
    """Immutable ordered sequence of (selector, value) pairs."""

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Iterable[ChoicePair | tuple[Selector, Any]] = ()):
        """Build a group from pairs, validating each one.

        Args:
            pairs: (selector, value) pairs in emission order

        Raises:
            TypeMismatch: If a value does not match its selector, or selectors
                come from different vocabularies
            DuplicateSelector: If a non-repeatable selector repeats
        """
        built = tuple(ChoicePair(*pair) for pair in pairs)
        self._validate(built)
        self._pairs = built

    @classmethod
    def from_parallel(
        cls, selectors: Sequence[Selector], values: Sequence[Any]
    ) -> "OrderedChoiceGroup":
        """Build a group from parallel selector and value sequences.

        Raises:
            ArityMismatch: If the sequences differ in length
        """
        selectors = tuple(selectors)
        values = tuple(values)
        if len(selectors) != len(values):
            raise ArityMismatch(len(selectors), len(values))
        return cls(zip(selectors, values))

    @staticmethod
    def _validate(pairs: tuple[ChoicePair, ...]) -> None:
        vocabulary = None
        seen = set()
        for index, (selector, value) in enumerate(pairs):
            if not _is_selector(selector):
                raise TypeMismatch(selector, value, index)
            if vocabulary is None:
                vocabulary = type(selector)
            elif type(selector) is not vocabulary:
                raise TypeMismatch(selector, value, index)

            # bool is an int subclass but never a valid value for any element
            if isinstance(value, bool) or not isinstance(value, selector.value_type):
                raise TypeMismatch(selector, value, index)

            if selector in seen and not selector.repeatable:
                raise DuplicateSelector(selector, index)
            seen.add(selector)

    def pairs(self) -> Iterator[ChoicePair]:
        """Return a fresh iterator over the pairs in construction order."""
        return iter(self._pairs)

    @property
    def selectors(self) -> tuple[Selector, ...]:
        return tuple(pair.selector for pair in self._pairs)

    @property
    def values(self) -> tuple[Any, ...]:
        return tuple(pair.value for pair in self._pairs)

    def __iter__(self) -> Iterator[ChoicePair]:
        return self.pairs()

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedChoiceGroup):
            return NotImplemented
        return self._pairs == other._pairs

    def __hash__(self) -> int:
        return hash(self._pairs)

    def __repr__(self) -> str:
        inner = ", ".join(f"{p.selector.tag}={p.value!r}" for p in self._pairs)
        return f"OrderedChoiceGroup({inner})"
