"""Data models for RSS 2.0 feed documents."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .choice import OrderedChoiceGroup
from .errors import TypeMismatch


@dataclass(frozen=True)
class Image:
    """Represents a channel image."""

    url: str
    link: str
    title: str
    width: int
    height: int


@dataclass(frozen=True)
class Guid:
    """Represents an item identifier."""

    value: str
    is_permalink: bool = True


@dataclass(frozen=True)
class Category:
    """Represents an item category."""

    value: str


class ChannelElement(Enum):
    """Optional child elements of ``channel``."""

    TITLE = ("title", str)
    LINK = ("link", str)
    LANGUAGE = ("language", str)
    IMAGE = ("image", Image)
    RATING = ("rating", str)

    def __init__(self, tag: str, value_type: type, repeatable: bool = False):
        self.tag = tag
        self.value_type = value_type
        self.repeatable = repeatable


class ItemElement(Enum):
    """Optional child elements of ``item``."""

    LINK = ("link", str)
    PUB_DATE = ("pubDate", datetime)
    GUID = ("guid", Guid)
    TITLE = ("title", str)
    DESCRIPTION = ("description", str)
    CATEGORY = ("category", Category, True)

    def __init__(self, tag: str, value_type: type, repeatable: bool = False):
        self.tag = tag
        self.value_type = value_type
        self.repeatable = repeatable


def _require_vocabulary(group: OrderedChoiceGroup, vocabulary: type[Enum]) -> None:
    for index, (selector, value) in enumerate(group.pairs()):
        if not isinstance(selector, vocabulary):
            raise TypeMismatch(selector, value, index)


@dataclass(frozen=True)
class Item:
    """Represents a single feed item."""

    elements: OrderedChoiceGroup = field(default_factory=OrderedChoiceGroup)

    def __post_init__(self):
        _require_vocabulary(self.elements, ItemElement)


@dataclass(frozen=True)
class Channel:
    """Represents the feed channel and its items."""

    elements: OrderedChoiceGroup = field(default_factory=OrderedChoiceGroup)
    items: tuple[Item, ...] = ()

    def __post_init__(self):
        _require_vocabulary(self.elements, ChannelElement)
        # Accept any iterable of items but store an immutable tuple
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class FeedDocument:
    """Represents a complete RSS 2.0 document."""

    channel: Channel
