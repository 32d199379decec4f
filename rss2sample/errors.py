"""Exceptions for RSS 2.0 feed construction and serialization."""

from typing import Any


class Rss2SampleError(Exception):
    """Base exception for all rss2sample errors."""


class ContractError(Rss2SampleError):
    """Base exception for choice group construction contract violations."""


class ArityMismatch(ContractError):
    """Raised when selector and value sequences differ in length."""

    def __init__(self, selector_count: int, value_count: int) -> None:
        self.selector_count = selector_count
        self.value_count = value_count
        super().__init__(
            f"Choice group has {selector_count} selector(s) "
            f"but {value_count} value(s)"
        )


class TypeMismatch(ContractError):
    """Raised when a value does not have the shape its selector declares."""

    def __init__(self, selector: Any, value: Any, index: int) -> None:
        self.selector = selector
        self.value = value
        self.index = index
        expected = getattr(selector, "value_type", None)
        expected_name = expected.__name__ if expected else "a known selector"
        super().__init__(
            f"Pair {index}: selector '{getattr(selector, 'tag', selector)}' "
            f"expects {expected_name}, got {type(value).__name__}"
        )


class DuplicateSelector(ContractError):
    """Raised when a non-repeatable selector appears more than once."""

    def __init__(self, selector: Any, index: int) -> None:
        self.selector = selector
        self.index = index
        super().__init__(
            f"Pair {index}: selector '{selector.tag}' may only appear once"
        )


class CoercionError(Rss2SampleError):
    """Raised when a value is outside the domain of its formatter."""

    def __init__(self, kind: str, value: Any, reason: str) -> None:
        self.kind = kind
        self.value = value
        self.reason = reason
        super().__init__(f"Cannot format {value!r} as {kind}: {reason}")


class SerializationError(Rss2SampleError):
    """Raised when a document field cannot be emitted."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"Failed to serialize {field}: {message}")


class FeedFileError(Rss2SampleError):
    """Raised when a JSON feed description cannot be loaded."""
