"""
Base class for the tag format readers.

A tag reader works in two steps. _load_data() issues whatever
load_range() calls the format needs, awaiting each before computing
the next offset. _parse_data() then decodes synchronously from the
loaded bytes only. Nothing is returned to the caller unless both steps
complete, so a failed load never yields a partial tag map.

Subclass contract:
    get_tag_identifier_byte_range() -> ByteRange sniffed by the dispatcher
    can_read_tag_format(data) -> bool over those bytes
    _load_data(media_file_reader)
    _parse_data(media_file_reader, tags) -> TagResult
    get_shortcuts() -> {shortcut: [field ids in priority order]}
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from mediatags.core.exceptions import MalformedStructureError, MediaTagsError
from mediatags.core.logger import get_logger
from mediatags.files.media_file_reader import MediaFileReader
from mediatags.tags.models import ByteRange, TagResult

logger = get_logger(__name__)


class MediaTagReader(ABC):
    """
    Reads the tags of one format from a byte source.

    Attributes:
        name: Registry name of the reader (e.g. "id3v2").
    """

    name = ""

    def __init__(self, media_file_reader: MediaFileReader) -> None:
        self._media_file_reader = media_file_reader
        self._tags: list[str] | None = None

    @classmethod
    def get_tag_identifier_byte_range(cls) -> ByteRange:
        """Return the byte range holding the format's identifier."""
        raise NotImplementedError(f"{cls.__name__} must implement get_tag_identifier_byte_range()")

    @classmethod
    def can_read_tag_format(cls, tag_identifier: bytes) -> bool:
        """Return True if tag_identifier marks this reader's format."""
        raise NotImplementedError(f"{cls.__name__} must implement can_read_tag_format()")

    def set_tags_to_read(self, tags: Iterable[str] | None) -> "MediaTagReader":
        """
        Restrict the result to the given field ids and shortcut names.

        Args:
            tags: Names to read, or None to read everything.

        Returns:
            self, for chaining.
        """
        self._tags = list(tags) if tags is not None else None
        return self

    async def read(self) -> TagResult:
        """
        Load and decode the tags.

        Returns:
            TagResult: The decoded tags.

        Raises:
            ByteSourceError: If the byte source fails while loading.
            TagDecodeError: If the tag data cannot be decoded. Unexpected
                            decoding errors are wrapped as MalformedStructureError.
        """
        await self._media_file_reader.init()
        await self._load_data(self._media_file_reader)
        try:
            return self._parse_data(self._media_file_reader, self._tags)
        except MediaTagsError:
            raise
        except (IndexError, KeyError, ValueError) as e:
            raise MalformedStructureError(
                f"Malformed {self.name or type(self).__name__} data: {e}",
                details={"reader": type(self).__name__, "original_error": repr(e)}
            ) from e

    def get_shortcuts(self) -> dict[str, list[str]]:
        """Map shortcut names to field ids, first present id wins."""
        return {}

    def _expand_shortcut_tags(self, tags_with_shortcuts: list[str] | None) -> list[str] | None:
        """
        Replace shortcut names with the field ids they stand for.

        Names that are not shortcuts are kept as they are.
        """
        if tags_with_shortcuts is None:
            return None

        shortcuts = self.get_shortcuts()
        tags: list[str] = []
        for tag in tags_with_shortcuts:
            tags.extend(shortcuts.get(tag, [tag]))
        return tags

    @abstractmethod
    async def _load_data(self, media_file_reader: MediaFileReader) -> None:
        """Load every range _parse_data() will read."""

    @abstractmethod
    def _parse_data(self, media_file_reader: MediaFileReader, tags: list[str] | None) -> TagResult:
        """Decode the loaded bytes into a TagResult."""


def filter_tags(tags: dict, requested: list[str] | None) -> dict:
    """Keep only the requested keys; everything when requested is None."""
    if requested is None:
        return tags
    return {key: value for key, value in tags.items() if key in requested}
