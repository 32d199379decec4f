"""Sample feed content and JSON feed loading for rss2sample."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from dateutil import parser as date_parser

from .choice import OrderedChoiceGroup
from .errors import FeedFileError
from .logging_config import create_execution_logger
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

WEBLOG_TITLE = "TheArchitect.co.uk - Jorgen Thelin's weblog"
WEBLOG_URI = "http://www.thearchitect.co.uk/weblog/"
WEBLOG_IMAGE_URI = "http://www.thearchitect.co.uk/images/jorgen-thelin.jpg"
WEBLOG_LANGUAGE = "en-US"
WEBLOG_RATING = (
    '(PICS-1.1 "http://www.rsac.org/ratingsv01.html" l by "webmaster@example.com" '
    'on "2007.01.29T10:09-0800" r (n 0 s 0 v 0 l 0))'
)

ITEM_ID_TAG = "tag:www.thearchitect.co.uk,2008:/weblog//2.520"
ITEM_URI = (
    "http://www.thearchitect.co.uk/weblog/archives/2008/09/"
    "spore_arrives_drm_copyprotection_is_a_bug_not_a_feature.html"
)
ITEM_TITLE = "Spore Arrives"
ITEM_BODY = "The much anticipated Spore game is available today"
ITEM_CATEGORY = "Games"
ITEM_PUB_DATE = datetime(2008, 9, 7, 20, 2, 1, tzinfo=UTC)


def build_sample_feed() -> FeedDocument:
    """Build the demonstration weblog feed with a single item."""
    image = Image(
        url=WEBLOG_IMAGE_URI,
        link=WEBLOG_URI,
        title=WEBLOG_TITLE,
        width=125,
        height=100,
    )

    item = Item(
        OrderedChoiceGroup.from_parallel(
            [
                ItemElement.LINK,
                ItemElement.PUB_DATE,
                ItemElement.GUID,
                ItemElement.TITLE,
                ItemElement.DESCRIPTION,
                ItemElement.CATEGORY,
            ],
            [
                ITEM_URI,
                ITEM_PUB_DATE,
                Guid(ITEM_ID_TAG, is_permalink=False),
                ITEM_TITLE,
                ITEM_BODY,
                Category(ITEM_CATEGORY),
            ],
        )
    )

    channel = Channel(
        OrderedChoiceGroup(
            [
                (ChannelElement.TITLE, WEBLOG_TITLE),
                (ChannelElement.LINK, WEBLOG_URI),
                (ChannelElement.LANGUAGE, WEBLOG_LANGUAGE),
                (ChannelElement.IMAGE, image),
                (ChannelElement.RATING, WEBLOG_RATING),
            ]
        ),
        items=(item,),
    )
    return FeedDocument(channel)


_CHANNEL_TAGS = {element.tag: element for element in ChannelElement}
_ITEM_TAGS = {element.tag: element for element in ItemElement}


def _parse_pub_date(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise FeedFileError(f"pubDate must be a string, got {type(raw).__name__}")
    try:
        published = date_parser.parse(raw)
    except (ValueError, OverflowError) as e:
        raise FeedFileError(f"Invalid pubDate {raw!r}: {e}") from e
    # Dates without an offset are taken as UTC
    if published.tzinfo is None:
        published = published.replace(tzinfo=UTC)
    return published


def _parse_value(selector: ChannelElement | ItemElement, raw: Any) -> Any:
    try:
        if selector is ChannelElement.IMAGE:
            return Image(
                url=raw["url"],
                link=raw["link"],
                title=raw["title"],
                width=raw["width"],
                height=raw["height"],
            )
        if selector is ItemElement.GUID:
            if isinstance(raw, str):
                return Guid(raw)
            is_permalink = raw.get("is_permalink", True)
            if not isinstance(is_permalink, bool):
                raise FeedFileError(
                    f"guid.is_permalink must be true or false, got {is_permalink!r}"
                )
            return Guid(raw["value"], is_permalink=is_permalink)
        if selector is ItemElement.CATEGORY:
            if isinstance(raw, str):
                return Category(raw)
            return Category(raw["value"])
    except (KeyError, TypeError, AttributeError) as e:
        raise FeedFileError(f"Invalid value for '{selector.tag}': {e!r}") from e

    if selector is ItemElement.PUB_DATE:
        return _parse_pub_date(raw)
    return raw


def _parse_group(
    raw_pairs: Any, vocabulary: dict[str, ChannelElement | ItemElement], where: str
) -> OrderedChoiceGroup:
    if not isinstance(raw_pairs, list):
        raise FeedFileError(f"{where}.elements must be a list of [tag, value] pairs")

    pairs = []
    for index, raw_pair in enumerate(raw_pairs):
        if not isinstance(raw_pair, list) or len(raw_pair) != 2:
            raise FeedFileError(f"{where}.elements[{index}] must be a [tag, value] pair")
        tag, raw_value = raw_pair
        selector = vocabulary.get(tag) if isinstance(tag, str) else None
        if selector is None:
            raise FeedFileError(f"{where}.elements[{index}]: unknown element '{tag}'")
        pairs.append((selector, _parse_value(selector, raw_value)))
    return OrderedChoiceGroup(pairs)


def parse_feed(data: Any) -> FeedDocument:
    """Build a FeedDocument from a decoded JSON feed description.

    Args:
        data: Decoded JSON object with a "channel" key

    Returns:
        FeedDocument built from the description

    Raises:
        FeedFileError: If the description is malformed
        ContractError: If an element value does not match its element kind
    """
    if not isinstance(data, dict) or not isinstance(data.get("channel"), dict):
        raise FeedFileError("Feed description must be an object with a 'channel' object")

    raw_channel = data["channel"]
    raw_items = raw_channel.get("items", [])
    if not isinstance(raw_items, list):
        raise FeedFileError("channel.items must be a list")

    items = []
    for index, raw_item in enumerate(raw_items):
        if not isinstance(raw_item, dict):
            raise FeedFileError(f"channel.items[{index}] must be an object")
        items.append(
            Item(_parse_group(raw_item.get("elements", []), _ITEM_TAGS, f"item[{index}]"))
        )

    elements = _parse_group(raw_channel.get("elements", []), _CHANNEL_TAGS, "channel")
    return FeedDocument(Channel(elements, items=tuple(items)))


def load_feed(path: Path, execution_id: str | None = None) -> FeedDocument:
    """Load a FeedDocument from a JSON feed description file.

    Args:
        path: Path of the JSON file
        execution_id: Execution ID for logging context

    Returns:
        FeedDocument described by the file

    Raises:
        FeedFileError: If the file is missing, unreadable or malformed
    """
    logger = create_execution_logger("feed_loader", execution_id)
    logger.info("Loading feed description", feed_file=str(path))

    if not path.exists():
        raise FeedFileError(f"Feed file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise FeedFileError(f"Invalid JSON in feed file: {e}") from e
    except UnicodeDecodeError as e:
        raise FeedFileError(f"Feed file is not valid UTF-8: {e}") from e
    except OSError as e:
        raise FeedFileError(f"Error reading feed file: {e}") from e

    document = parse_feed(data)
    logger.info(
        "Feed description loaded",
        feed_file=str(path),
        items_count=len(document.channel.items),
    )
    return document
