"""Configuration management for rss2sample."""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class SerializerConfig:
    """Configuration for XML output."""

    indent: int = 2
    xml_declaration: bool = True


class Config:
    """Main configuration manager."""

    DEFAULT_LOG_LEVEL = "INFO"
    DEFAULT_INDENT = 2

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.log_level = os.getenv("LOG_LEVEL", self.DEFAULT_LOG_LEVEL)
        self.feed_file = os.getenv("RSS2SAMPLE_FEED_FILE", "").strip()
        self.indent = self._parse_indent(os.getenv("RSS2SAMPLE_INDENT", ""))

    @classmethod
    def _parse_indent(cls, raw: str) -> int:
        if not raw.strip():
            return cls.DEFAULT_INDENT
        try:
            indent = int(raw)
        except ValueError as e:
            raise ValueError(f"RSS2SAMPLE_INDENT must be an integer: {raw!r}") from e
        if indent < 0:
            raise ValueError(f"RSS2SAMPLE_INDENT must not be negative: {indent}")
        return indent

    def get_feed_path(self) -> Path | None:
        """Get the JSON feed file path, or None to use the built-in sample."""
        return Path(self.feed_file) if self.feed_file else None

    def get_serializer_config(self) -> SerializerConfig:
        """Get serializer configuration."""
        return SerializerConfig(indent=self.indent)
