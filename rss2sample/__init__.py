"""RSS 2.0 document producer built on ordered choice groups."""

from .choice import ChoicePair, OrderedChoiceGroup
from .models import (
    Category,
    Channel,
    ChannelElement,
    FeedDocument,
    Guid,
    Image,
    Item,
    ItemElement,
)
from .serializer import FeedSerializer

__all__ = [
    "Category",
    "Channel",
    "ChannelElement",
    "ChoicePair",
    "FeedDocument",
    "FeedSerializer",
    "Guid",
    "Image",
    "Item",
    "ItemElement",
    "OrderedChoiceGroup",
]
