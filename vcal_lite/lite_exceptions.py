"""Exception hierarchy for calendar text parsing - vcal_lite.

Every failure raised while turning calendar text into a tree derives from
``LiteVCalError``. Parse failures carry the kind of failure, the offset at
which parsing could not proceed and the production that was being attempted,
so callers can report a precise location or fall back to rendering nothing.
"""

from enum import Enum
from typing import Optional


class LiteParseErrorKind(str, Enum):
    """Kinds of unrecoverable parse failures."""

    MALFORMED_CONTENT_LINE = "malformed_content_line"
    UNTERMINATED_BLOCK = "unterminated_block"
    MISSING_BLOCK = "missing_block"
    CAPACITY_EXCEEDED = "capacity_exceeded"


class LiteVCalError(Exception):
    """Base exception for all vcal_lite errors."""


class LiteParseError(LiteVCalError):
    """A calendar document could not be parsed.

    Attributes:
        kind: Failure kind
        position: Code-point offset into the parsed (unfolded) text
        production: Name of the production being attempted at ``position``
        text: The text being parsed, used to derive line/column information
    """

    kind: LiteParseErrorKind = LiteParseErrorKind.MALFORMED_CONTENT_LINE

    def __init__(
        self,
        message: str,
        *,
        position: int,
        production: str,
        text: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.position = position
        self.production = production
        self.text = text

    @property
    def byte_offset(self) -> int:
        """UTF-8 byte offset of ``position`` (equals ``position`` for ASCII input)."""
        if self.text is None:
            return self.position
        return len(self.text[: self.position].encode("utf-8"))

    @property
    def lineno(self) -> Optional[int]:
        """1-based line number of the failure, counting LF as line separator."""
        if self.text is None:
            return None
        return self.text.count("\n", 0, self.position) + 1

    @property
    def col(self) -> Optional[int]:
        """1-based column of the failure within its line."""
        if self.text is None:
            return None
        return self.position - self.text.rfind("\n", 0, self.position)

    @property
    def line(self) -> Optional[str]:
        """The physical line containing the failure, without its line break."""
        if self.text is None:
            return None
        start = self.text.rfind("\n", 0, self.position) + 1
        end = self.text.find("\n", self.position)
        if end < 0:
            end = len(self.text)
        return self.text[start:end].rstrip("\r")

    def __str__(self) -> str:
        location = f"at char {self.position}"
        if self.text is not None:
            location += f", (line:{self.lineno}, col:{self.col})"
        return f"{self.message} while parsing {self.production} ({location})"


class LiteMalformedContentLineError(LiteParseError):
    """A logical line does not match the content-line grammar.

    Raised when:
    - The property or parameter name is empty or contains invalid characters
    - The mandatory ``:`` separator is missing
    - A line inside a block fits none of the block's productions
    """

    kind = LiteParseErrorKind.MALFORMED_CONTENT_LINE


class LiteUnterminatedBlockError(LiteParseError):
    """Input ended before the ``END:<NAME>`` marker of an opened block.

    ``begin_position`` is the offset of the block's ``BEGIN:`` marker.
    """

    kind = LiteParseErrorKind.UNTERMINATED_BLOCK

    def __init__(
        self,
        message: str,
        *,
        position: int,
        production: str,
        text: Optional[str] = None,
        begin_position: Optional[int] = None,
    ) -> None:
        super().__init__(message, position=position, production=production, text=text)
        self.begin_position = begin_position


class LiteMissingBlockError(LiteParseError):
    """The document does not open with the expected ``BEGIN:<NAME>`` marker."""

    kind = LiteParseErrorKind.MISSING_BLOCK


class LiteCapacityExceededError(LiteParseError):
    """A bounded sequence, view or document exceeded its configured limit.

    ``limit_name`` names the ``LiteParserLimits`` field that was exceeded.
    """

    kind = LiteParseErrorKind.CAPACITY_EXCEEDED

    def __init__(
        self,
        message: str,
        *,
        position: int,
        production: str,
        limit_name: str,
        limit: int,
        text: Optional[str] = None,
    ) -> None:
        super().__init__(message, position=position, production=production, text=text)
        self.limit_name = limit_name
        self.limit = limit
