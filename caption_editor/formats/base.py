"""Abstract base codec and the closed set of format identifiers.

WHY: Every subtitle format consumes and produces the same caption IR but
with a different grammar. This base class enforces a consistent interface
so the store, CLI, and API layers can import and export any format
generically, and the CaptionFormat enum makes the set of formats closed.

HOW: BaseCodec is an ABC with a ``name``, file ``extension``, ``media_type``,
and ``parse()`` / ``format()`` methods. Export-only codecs set
``can_parse = False`` and inherit a parse() that raises UnsupportedFormat.

RULES:
- parse() is pure: it returns new Caption objects and never touches a store
- Ids returned by parse() are provisional; the store reassigns them on import
- format() is read-only with respect to its input
- To add a format: add a CaptionFormat member, write a BaseCodec subclass,
  and register it in CODECS in formats/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Sequence, Union

from caption_editor.core.errors import UnsupportedFormat
from caption_editor.core.ir import Caption


class CaptionFormat(str, Enum):
    """Identifiers of every supported caption format."""

    SRT = "srt"
    VTT = "vtt"
    ASS = "ass"
    JSON = "json"
    TXT = "txt"
    FCPXML = "fcpxml"
    EDL = "edl"

    @classmethod
    def parse_key(cls, value: Union[str, "CaptionFormat"]) -> "CaptionFormat":
        """Resolve a format key (case-insensitive) or raise UnsupportedFormat."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedFormat(str(value)) from None


class BaseCodec(ABC):
    """Abstract base for all caption format codecs."""

    extension: str = ""
    media_type: str = "text/plain"
    can_parse: bool = True

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SubRip'."""

    def parse(self, text: str) -> List[Caption]:
        """Decode ``text`` into captions in file order.

        Raises:
            ParseFailure: If the content is malformed.
            UnsupportedFormat: If the format is export-only.
        """
        raise UnsupportedFormat(self.extension.lstrip("."), "Import not supported for format")

    @abstractmethod
    def format(self, captions: Sequence[Caption]) -> str:
        """Encode ``captions`` into the format's text representation."""


def provisional_id(index: int) -> str:
    """Placeholder id for a freshly parsed caption (replaced on import)."""
    return "parsed_{}".format(index)
