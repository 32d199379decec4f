"""Locale-invariant formatting of feed values into XML text."""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from urllib.parse import urlsplit, urlunsplit

from .errors import CoercionError

_LANGUAGE_SUBTAG = re.compile(r"^[A-Za-z0-9]{1,8}$")


@dataclass(frozen=True)
class InvariantFormat:
    """Culture data used for rendering, independent of the process locale."""

    weekday_names: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
    month_names: tuple[str, ...] = (
        "Jan",
        "Feb",
        "Mar",
        "Apr",
        "May",
        "Jun",
        "Jul",
        "Aug",
        "Sep",
        "Oct",
        "Nov",
        "Dec",
    )
    digits: str = "0123456789"


INVARIANT = InvariantFormat()


class ValueCoercion:
    """Turns domain values into the exact strings written to the feed."""

    def __init__(self, fmt: InvariantFormat = INVARIANT):
        """Initialize with the formatting data to render with.

        Args:
            fmt: Weekday/month names and digit symbols
        """
        self.fmt = fmt

    def integer(self, value: int) -> str:
        """Render a non-negative integer as plain decimal digits.

        Args:
            value: Integer to render

        Returns:
            Digit string without sign or grouping separators

        Raises:
            CoercionError: If value is not a non-negative int
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise CoercionError("integer", value, "expected int")
        if value < 0:
            raise CoercionError("integer", value, "negative values have no form")

        return "".join(self.fmt.digits[int(d)] for d in str(value))

    def _two_digits(self, value: int) -> str:
        return self.integer(value).rjust(2, self.fmt.digits[0])

    def timestamp(self, value: datetime) -> str:
        """Render an aware datetime in RFC 1123 form, always in GMT.

        Args:
            value: Timezone-aware datetime

        Returns:
            String like "Sun, 07 Sep 2008 20:02:01 GMT"

        Raises:
            CoercionError: If value is not an aware datetime
        """
        if not isinstance(value, datetime):
            raise CoercionError("timestamp", value, "expected datetime")
        if value.tzinfo is None or value.utcoffset() is None:
            raise CoercionError(
                "timestamp", value, "naive datetimes must be normalized to UTC first"
            )

        try:
            utc = value.astimezone(UTC)
        except (OverflowError, ValueError) as e:
            raise CoercionError("timestamp", value, str(e)) from e
        return "{dow}, {day} {mon} {year} {hh}:{mm}:{ss} GMT".format(
            dow=self.fmt.weekday_names[utc.weekday()],
            day=self._two_digits(utc.day),
            mon=self.fmt.month_names[utc.month - 1],
            year=self.integer(utc.year).rjust(4, self.fmt.digits[0]),
            hh=self._two_digits(utc.hour),
            mm=self._two_digits(utc.minute),
            ss=self._two_digits(utc.second),
        )

    def uri(self, value: str) -> str:
        """Render an absolute URI in its canonical absolute form.

        Scheme and host are lowercased and an authority with an empty path
        gains a "/". Everything else is kept verbatim.

        Raises:
            CoercionError: If value is empty, relative or not a string
        """
        if not isinstance(value, str):
            raise CoercionError("uri", value, "expected str")
        text = value.strip()
        if not text:
            raise CoercionError("uri", value, "empty URI")

        try:
            parts = urlsplit(text)
        except ValueError as e:
            raise CoercionError("uri", value, str(e)) from e

        if not parts.scheme:
            raise CoercionError("uri", value, "relative URIs are not accepted")

        netloc = parts.netloc
        if netloc:
            userinfo, sep, hostport = netloc.rpartition("@")
            netloc = f"{userinfo}{sep}{hostport.lower()}"

        path = parts.path
        if netloc and not path:
            path = "/"

        return urlunsplit(
            (parts.scheme.lower(), netloc, path, parts.query, parts.fragment)
        )

    def language_tag(self, value: str) -> str:
        """Render a language tag with canonical BCP 47 casing.

        Raises:
            CoercionError: If value is not a well-formed tag
        """
        if not isinstance(value, str):
            raise CoercionError("language tag", value, "expected str")

        subtags = value.strip().replace("_", "-").split("-")
        if not subtags[0] or not all(_LANGUAGE_SUBTAG.match(s) for s in subtags):
            raise CoercionError("language tag", value, "malformed tag")
        if not subtags[0].isalpha():
            raise CoercionError("language tag", value, "primary subtag must be letters")

        canonical = [subtags[0].lower()]
        for subtag in subtags[1:]:
            if len(subtag) == 4 and subtag.isalpha():
                canonical.append(subtag.title())  # script
            elif (len(subtag) == 2 and subtag.isalpha()) or (
                len(subtag) == 3 and subtag.isdigit()
            ):
                canonical.append(subtag.upper())  # region
            else:
                canonical.append(subtag.lower())
        return "-".join(canonical)


_default = ValueCoercion()


def coerce_integer(value: int) -> str:
    """Render an integer with the invariant format."""
    return _default.integer(value)


def coerce_timestamp(value: datetime) -> str:
    """Render a timestamp with the invariant format."""
    return _default.timestamp(value)


def coerce_uri(value: str) -> str:
    """Render an absolute URI."""
    return _default.uri(value)


def coerce_language_tag(value: str) -> str:
    """Render a canonical language tag."""
    return _default.language_tag(value)
