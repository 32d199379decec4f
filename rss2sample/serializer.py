"""RSS 2.0 serialization module for rss2sample."""

import re
import sys
import xml.etree.ElementTree as ET
from collections.abc import Callable
from enum import Enum
from typing import Any, TextIO

from .choice import OrderedChoiceGroup
from .coercion import ValueCoercion
from .config import SerializerConfig
from .errors import CoercionError, SerializationError
from .logging_config import create_execution_logger
from .models import ChannelElement, FeedDocument, Guid, Image, Item, ItemElement

RSS_VERSION = "2.0"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# Characters that cannot appear anywhere in an XML 1.0 document
_INVALID_XML_CHARS = re.compile(
    "[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)


class SerializerState(Enum):
    """Position of the serializer in the document tree."""

    IDLE = "idle"
    IN_CHANNEL = "in_channel"
    IN_IMAGE = "in_image"
    IN_ITEM = "in_item"


_TRANSITIONS = {
    (SerializerState.IDLE, "channel"): SerializerState.IN_CHANNEL,
    (SerializerState.IN_CHANNEL, "image"): SerializerState.IN_IMAGE,
    (SerializerState.IN_CHANNEL, "item"): SerializerState.IN_ITEM,
}


class _ElementStack:
    """Open/close element stack enforcing strict nesting."""

    def __init__(self, root: ET.Element):
        self.root = root
        self._stack: list[tuple[ET.Element, SerializerState]] = [
            (root, SerializerState.IDLE)
        ]

    @property
    def state(self) -> SerializerState:
        return self._stack[-1][1]

    @property
    def depth(self) -> int:
        return len(self._stack)

    def open(self, tag: str, attrib: dict[str, str] | None = None) -> ET.Element:
        """Open a container element as a child of the current element."""
        next_state = _TRANSITIONS.get((self.state, tag))
        if next_state is None:
            raise SerializationError(
                tag, f"cannot open <{tag}> in state {self.state.value}"
            )
        element = ET.SubElement(self._stack[-1][0], tag, attrib or {})
        self._stack.append((element, next_state))
        return element

    def leaf(self, tag: str, text: str, attrib: dict[str, str] | None = None) -> None:
        """Write an element with text content and close it immediately."""
        if self.state is SerializerState.IDLE:
            raise SerializationError(tag, "text elements must be inside channel")
        element = ET.SubElement(self._stack[-1][0], tag, attrib or {})
        element.text = text

    def close(self, tag: str) -> None:
        """Close the innermost open element, which must be ``tag``."""
        if self.depth <= 1:
            raise SerializationError(tag, "no open element to close")
        element, _ = self._stack[-1]
        if element.tag != tag:
            raise SerializationError(
                tag, f"expected to close <{element.tag}>, not <{tag}>"
            )
        self._stack.pop()

    def finish(self) -> ET.Element:
        """Close the root element and return the completed tree."""
        if self.depth != 1:
            unclosed = ", ".join(e.tag for e, _ in self._stack[1:])
            raise SerializationError(self.root.tag, f"unclosed elements: {unclosed}")
        self._stack.pop()
        return self.root


class FeedSerializer:
    """Emits RSS 2.0 XML for a FeedDocument."""

    def __init__(
        self,
        config: SerializerConfig | None = None,
        coercion: ValueCoercion | None = None,
        execution_id: str | None = None,
    ):
        """Initialize FeedSerializer with configuration.

        Args:
            config: Output formatting options
            coercion: Value formatter, invariant by default
            execution_id: Execution ID for logging context
        """
        self.config = config or SerializerConfig()
        self.coercion = coercion or ValueCoercion()
        self.logger = create_execution_logger("serializer", execution_id)

        self._channel_writers: dict[ChannelElement, Callable[..., None]] = {
            ChannelElement.TITLE: self._write_text,
            ChannelElement.LINK: self._write_uri,
            ChannelElement.LANGUAGE: self._write_language,
            ChannelElement.IMAGE: self._write_image,
            ChannelElement.RATING: self._write_text,
        }
        self._item_writers: dict[ItemElement, Callable[..., None]] = {
            ItemElement.LINK: self._write_uri,
            ItemElement.PUB_DATE: self._write_timestamp,
            ItemElement.GUID: self._write_guid,
            ItemElement.TITLE: self._write_text,
            ItemElement.DESCRIPTION: self._write_text,
            ItemElement.CATEGORY: self._write_category,
        }

        self.logger.debug("FeedSerializer initialized", indent=self.config.indent)

    def emit(self, document: FeedDocument) -> str:
        """Serialize a document to RSS 2.0 XML text.

        The tree is built completely before any text is rendered, so a
        failure never yields a partial document.

        Args:
            document: Feed document to serialize

        Returns:
            XML text, including the XML declaration when configured

        Raises:
            SerializationError: If a value cannot be formatted
        """
        channel = document.channel
        self.logger.log_execution_start(
            channel_elements=len(channel.elements), items_count=len(channel.items)
        )

        try:
            root = ET.Element(
                "rss",
                {
                    "xmlns:xsi": XSI_NAMESPACE,
                    "xmlns:xsd": XSD_NAMESPACE,
                    "version": RSS_VERSION,
                },
            )
            stack = _ElementStack(root)

            stack.open("channel")
            self._write_group(stack, channel.elements, self._channel_writers, "channel")
            for index, item in enumerate(channel.items):
                self._write_item(stack, item, index)
            stack.close("channel")

            tree = stack.finish()
        except SerializationError as e:
            self.logger.error(
                f"Failed to serialize feed: {e}", field=e.field, error=str(e)
            )
            self.logger.log_execution_end(success=False)
            raise

        text = self._render(tree)
        self.logger.log_execution_end(success=True, output_length=len(text))
        return text

    def write(self, document: FeedDocument, stream: TextIO | None = None) -> None:
        """Serialize a document and write it, newline-terminated, to a stream."""
        text = self.emit(document)
        out = stream if stream is not None else sys.stdout
        out.write(text)
        out.write("\n")

    def _render(self, tree: ET.Element) -> str:
        if self.config.indent > 0:
            ET.indent(tree, space=" " * self.config.indent)
        body = ET.tostring(tree, encoding="unicode")
        if self.config.xml_declaration:
            return f"{XML_DECLARATION}\n{body}"
        return body

    def _write_item(self, stack: _ElementStack, item: Item, index: int) -> None:
        path = f"item[{index}]"
        stack.open("item")
        self._write_group(stack, item.elements, self._item_writers, path)
        stack.close("item")
        self.logger.debug("Item serialized", element=path, pairs=len(item.elements))

    def _write_group(
        self,
        stack: _ElementStack,
        group: OrderedChoiceGroup,
        writers: dict[Any, Callable[..., None]],
        path: str,
    ) -> None:
        # Pair order is emission order; never sorted or deduplicated
        for selector, value in group.pairs():
            writer = writers.get(selector)
            if writer is None:
                raise SerializationError(
                    f"{path}.{selector.tag}", "selector not valid here"
                )
            writer(stack, selector.tag, value, f"{path}.{selector.tag}")

    def _coerce(self, field: str, formatter: Callable[[Any], str], value: Any) -> str:
        try:
            return formatter(value)
        except CoercionError as e:
            raise SerializationError(field, str(e)) from e

    def _checked(self, field: str, text: str) -> str:
        if not isinstance(text, str):
            raise SerializationError(field, f"expected text, got {type(text).__name__}")
        if _INVALID_XML_CHARS.search(text):
            raise SerializationError(field, "text contains characters not allowed in XML")
        return text

    def _uri_text(self, field: str, value: str) -> str:
        return self._checked(field, self._coerce(field, self.coercion.uri, value))

    def _write_text(self, stack: _ElementStack, tag: str, value: str, field: str) -> None:
        stack.leaf(tag, self._checked(field, value))

    def _write_uri(self, stack: _ElementStack, tag: str, value: str, field: str) -> None:
        stack.leaf(tag, self._uri_text(field, value))

    def _write_language(
        self, stack: _ElementStack, tag: str, value: str, field: str
    ) -> None:
        stack.leaf(tag, self._coerce(field, self.coercion.language_tag, value))

    def _write_timestamp(self, stack: _ElementStack, tag: str, value, field: str) -> None:
        stack.leaf(tag, self._coerce(field, self.coercion.timestamp, value))

    def _write_image(self, stack: _ElementStack, tag: str, value: Image, field: str) -> None:
        # Sub-element order is fixed by the schema: url, link, width, height, title
        stack.open(tag)
        stack.leaf("url", self._uri_text(f"{field}.url", value.url))
        stack.leaf("link", self._uri_text(f"{field}.link", value.link))
        stack.leaf(
            "width", self._coerce(f"{field}.width", self.coercion.integer, value.width)
        )
        stack.leaf(
            "height", self._coerce(f"{field}.height", self.coercion.integer, value.height)
        )
        stack.leaf("title", self._checked(f"{field}.title", value.title))
        stack.close(tag)

    def _write_guid(self, stack: _ElementStack, tag: str, value: Guid, field: str) -> None:
        is_permalink = "true" if value.is_permalink else "false"
        stack.leaf(tag, self._checked(field, value.value), {"isPermaLink": is_permalink})

    def _write_category(self, stack: _ElementStack, tag: str, value, field: str) -> None:
        stack.leaf(tag, self._checked(field, value.value))
