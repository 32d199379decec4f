"""Unit tests for the RSS 2.0 serializer."""

import io
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone

import feedparser
import pytest

from rss2sample.choice import OrderedChoiceGroup
from rss2sample.config import SerializerConfig
from rss2sample.errors import CoercionError, SerializationError
from rss2sample.models import (
    Category,
    Channel,
    ChannelElement,
    FeedDocument,
    Guid,
    Image,
    Item,
    ItemElement,
)
from rss2sample.sample import build_sample_feed
from rss2sample.serializer import FeedSerializer, SerializerState, _ElementStack


def _parse(text: str) -> ET.Element:
    return ET.fromstring(text.encode("utf-8"))


def _child_tags(element: ET.Element) -> list[str]:
    return [child.tag for child in element]


def _channel(*pairs, items=()) -> FeedDocument:
    return FeedDocument(Channel(OrderedChoiceGroup(pairs), items=items))


class TestFeedSerializerUnit:
    """Unit tests for FeedSerializer.emit on specific documents."""

    def test_sample_feed_scenario(self):
        """The weblog sample emits the expected pubDate and guid."""
        text = FeedSerializer().emit(build_sample_feed())

        assert "<pubDate>Sun, 07 Sep 2008 20:02:01 GMT</pubDate>" in text
        assert (
            '<guid isPermaLink="false">'
            "tag:www.thearchitect.co.uk,2008:/weblog//2.520</guid>"
        ) in text
        assert "<title>TheArchitect.co.uk - Jorgen Thelin's weblog</title>" in text
        assert "<language>en-US</language>" in text

    def test_root_element_declarations(self):
        """The root carries the version and both schema namespaces."""
        text = FeedSerializer().emit(build_sample_feed())

        assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<rss ')
        assert 'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"' in text
        assert 'xmlns:xsd="http://www.w3.org/2001/XMLSchema"' in text
        assert _parse(text).get("version") == "2.0"

    def test_sample_feed_structure(self):
        """Channel children follow pair order, then items."""
        root = _parse(FeedSerializer().emit(build_sample_feed()))

        assert root.tag == "rss"
        channel = root.find("channel")
        assert _child_tags(channel) == [
            "title",
            "link",
            "language",
            "image",
            "rating",
            "item",
        ]
        assert _child_tags(channel.find("image")) == [
            "url",
            "link",
            "width",
            "height",
            "title",
        ]
        assert channel.findtext("image/width") == "125"
        assert channel.findtext("image/height") == "100"
        assert _child_tags(channel.find("item")) == [
            "link",
            "pubDate",
            "guid",
            "title",
            "description",
            "category",
        ]

    def test_pair_order_is_emission_order(self):
        """Elements are written in pair order, not vocabulary order."""
        document = _channel(
            (ChannelElement.RATING, "r"),
            (ChannelElement.LANGUAGE, "en-GB"),
            (ChannelElement.TITLE, "Weblog"),
            items=(
                Item(
                    OrderedChoiceGroup(
                        [
                            (ItemElement.CATEGORY, Category("B")),
                            (ItemElement.TITLE, "Post"),
                            (ItemElement.CATEGORY, Category("A")),
                        ]
                    )
                ),
            ),
        )

        channel = _parse(FeedSerializer().emit(document)).find("channel")

        assert _child_tags(channel) == ["rating", "language", "title", "item"]
        item = channel.find("item")
        assert _child_tags(item) == ["category", "title", "category"]
        assert [c.text for c in item.findall("category")] == ["B", "A"]

    def test_items_keep_insertion_order(self):
        items = tuple(
            Item(OrderedChoiceGroup([(ItemElement.TITLE, f"Post {i}")]))
            for i in range(5)
        )
        document = _channel((ChannelElement.TITLE, "Weblog"), items=items)

        channel = _parse(FeedSerializer().emit(document)).find("channel")

        assert [i.findtext("title") for i in channel.findall("item")] == [
            f"Post {i}" for i in range(5)
        ]

    def test_channel_without_items(self):
        """A channel with zero items has only its choice group children."""
        document = _channel(
            (ChannelElement.TITLE, "Weblog"),
            (ChannelElement.LINK, "http://example.com/"),
        )

        text = FeedSerializer().emit(document)

        assert "<item" not in text
        assert _child_tags(_parse(text).find("channel")) == ["title", "link"]

    def test_empty_channel(self):
        root = _parse(FeedSerializer().emit(FeedDocument(Channel())))

        assert _child_tags(root) == ["channel"]
        assert len(root.find("channel")) == 0

    def test_permalink_guid(self):
        document = _channel(
            items=(
                Item(
                    OrderedChoiceGroup(
                        [(ItemElement.GUID, Guid("http://example.com/post/1"))]
                    )
                ),
            )
        )

        guid = _parse(FeedSerializer().emit(document)).find("channel/item/guid")

        assert guid.get("isPermaLink") == "true"
        assert guid.text == "http://example.com/post/1"

    def test_links_are_coerced_to_absolute_form(self):
        document = _channel((ChannelElement.LINK, "HTTP://Example.COM"))

        channel = _parse(FeedSerializer().emit(document)).find("channel")

        assert channel.findtext("link") == "http://example.com/"

    def test_special_characters_are_escaped(self):
        document = _channel((ChannelElement.TITLE, "Tom & Jerry <live>"))

        text = FeedSerializer().emit(document)

        assert "<title>Tom &amp; Jerry &lt;live&gt;</title>" in text
        assert _parse(text).findtext("channel/title") == "Tom & Jerry <live>"

    def test_non_ascii_text(self):
        document = _channel((ChannelElement.TITLE, "Jörgen's wëblog ✓"))

        text = FeedSerializer().emit(document)

        assert "Jörgen's wëblog ✓" in text
        assert _parse(text).findtext("channel/title") == "Jörgen's wëblog ✓"

    def test_output_is_deterministic(self):
        serializer = FeedSerializer()
        document = build_sample_feed()

        assert serializer.emit(document) == serializer.emit(document)
        assert FeedSerializer().emit(document) == serializer.emit(document)

    def test_emit_does_not_mutate_document(self):
        document = build_sample_feed()
        snapshot = build_sample_feed()

        FeedSerializer().emit(document)

        assert document == snapshot

    def test_indent_zero_is_compact(self):
        text = FeedSerializer(SerializerConfig(indent=0)).emit(build_sample_feed())

        assert "\n" not in text.split("\n", 1)[1]
        assert "<channel><title>" in text

    def test_without_xml_declaration(self):
        config = SerializerConfig(xml_declaration=False)

        text = FeedSerializer(config).emit(build_sample_feed())

        assert text.startswith("<rss ")

    def test_write_appends_newline(self):
        stream = io.StringIO()

        FeedSerializer().write(build_sample_feed(), stream)

        assert stream.getvalue().endswith("</rss>\n")

    def test_feedparser_reads_output_as_rss2(self):
        """A standard feed reader recognises the output as RSS 2.0."""
        text = FeedSerializer().emit(build_sample_feed())

        parsed = feedparser.parse(text.encode("utf-8"))

        assert parsed.version == "rss20"
        assert parsed.feed.title == "TheArchitect.co.uk - Jorgen Thelin's weblog"
        assert len(parsed.entries) == 1
        entry = parsed.entries[0]
        assert entry.title == "Spore Arrives"
        assert entry.id == "tag:www.thearchitect.co.uk,2008:/weblog//2.520"
        assert entry.published_parsed[:6] == (2008, 9, 7, 20, 2, 1)


class TestFeedSerializerErrorsUnit:
    """Unit tests for serialization failures."""

    def test_negative_image_width_names_field(self):
        image = Image("http://example.com/a.png", "http://example.com/", "A", -1, 100)
        document = _channel((ChannelElement.IMAGE, image))

        with pytest.raises(SerializationError) as exc_info:
            FeedSerializer().emit(document)

        assert exc_info.value.field == "channel.image.width"
        assert isinstance(exc_info.value.__cause__, CoercionError)

    def test_naive_pub_date_names_item(self):
        document = _channel(
            items=(
                Item(OrderedChoiceGroup([(ItemElement.TITLE, "ok")])),
                Item(
                    OrderedChoiceGroup(
                        [(ItemElement.PUB_DATE, datetime(2008, 9, 7, 20, 2, 1))]
                    )
                ),
            )
        )

        with pytest.raises(SerializationError) as exc_info:
            FeedSerializer().emit(document)

        assert exc_info.value.field == "item[1].pubDate"

    def test_pub_date_outside_utc_range_names_item(self):
        published = datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=5)))
        document = _channel(
            items=(Item(OrderedChoiceGroup([(ItemElement.PUB_DATE, published)])),)
        )

        with pytest.raises(SerializationError) as exc_info:
            FeedSerializer().emit(document)

        assert exc_info.value.field == "item[0].pubDate"
        assert isinstance(exc_info.value.__cause__, CoercionError)

    def test_relative_link_names_field(self):
        document = _channel((ChannelElement.LINK, "/weblog/"))

        with pytest.raises(SerializationError) as exc_info:
            FeedSerializer().emit(document)

        assert exc_info.value.field == "channel.link"

    def test_bad_language_names_field(self):
        document = _channel((ChannelElement.LANGUAGE, "not a tag"))

        with pytest.raises(SerializationError) as exc_info:
            FeedSerializer().emit(document)

        assert exc_info.value.field == "channel.language"

    def test_control_characters_are_rejected(self):
        document = _channel((ChannelElement.TITLE, "bad\x00title"))

        with pytest.raises(SerializationError) as exc_info:
            FeedSerializer().emit(document)

        assert exc_info.value.field == "channel.title"

    def test_non_text_image_title_is_rejected(self):
        image = Image("http://example.com/a.png", "http://example.com/", 42, 1, 1)
        document = _channel((ChannelElement.IMAGE, image))

        with pytest.raises(SerializationError) as exc_info:
            FeedSerializer().emit(document)

        assert exc_info.value.field == "channel.image.title"

    def test_failed_emit_writes_nothing(self):
        """No partial document reaches the stream on failure."""
        stream = io.StringIO()
        document = _channel(
            (ChannelElement.TITLE, "Weblog"), (ChannelElement.LINK, "relative")
        )

        with pytest.raises(SerializationError):
            FeedSerializer().write(document, stream)

        assert stream.getvalue() == ""


class TestElementStackUnit:
    """Unit tests for the open/close element stack."""

    def test_state_transitions(self):
        stack = _ElementStack(ET.Element("rss"))
        assert stack.state is SerializerState.IDLE

        stack.open("channel")
        assert stack.state is SerializerState.IN_CHANNEL
        stack.open("image")
        assert stack.state is SerializerState.IN_IMAGE
        stack.close("image")
        stack.open("item")
        assert stack.state is SerializerState.IN_ITEM
        stack.close("item")
        stack.close("channel")
        assert stack.state is SerializerState.IDLE

        root = stack.finish()
        assert _child_tags(root.find("channel")) == ["image", "item"]

    def test_item_cannot_open_outside_channel(self):
        stack = _ElementStack(ET.Element("rss"))

        with pytest.raises(SerializationError):
            stack.open("item")

    def test_item_cannot_nest_in_item(self):
        stack = _ElementStack(ET.Element("rss"))
        stack.open("channel")
        stack.open("item")

        with pytest.raises(SerializationError):
            stack.open("item")

    def test_close_must_match_top(self):
        stack = _ElementStack(ET.Element("rss"))
        stack.open("channel")
        stack.open("item")

        with pytest.raises(SerializationError):
            stack.close("channel")

    def test_finish_with_open_elements_fails(self):
        stack = _ElementStack(ET.Element("rss"))
        stack.open("channel")

        with pytest.raises(SerializationError) as exc_info:
            stack.finish()

        assert "channel" in str(exc_info.value)

    def test_text_outside_channel_fails(self):
        stack = _ElementStack(ET.Element("rss"))

        with pytest.raises(SerializationError):
            stack.leaf("title", "Weblog")
