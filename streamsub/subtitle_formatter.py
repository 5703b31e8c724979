"""Handles serializing timed segments into subtitle text (SRT)."""

import logging
from abc import ABC, abstractmethod
from typing import Sequence

from .models import Segment
from .exceptions import FormattingError
from .utils import format_time_srt

logger = logging.getLogger(__name__)

class SubtitleFormatter(ABC):
    """Abstract base class for subtitle formatters."""

    file_extension: str = ""
    mime_type: str = "text/plain"

    @abstractmethod
    def serialize(self, segments: Sequence[Segment]) -> str:
        """
        Renders segments as the text of a subtitle file.

        Args:
            segments: Segments in playback order.

        Returns:
            The subtitle document. Must be a pure function of `segments`.

        Raises:
            FormattingError: If a segment cannot be rendered.
        """


class SRTFormatter(SubtitleFormatter):
    """Formats subtitles into the SRT (SubRip Text) format."""

    file_extension = "srt"
    mime_type = "application/x-subrip"

    def serialize(self, segments: Sequence[Segment]) -> str:
        """
        Renders segments as SRT cues numbered from 1.

        Each cue is the ordinal line, the timing line
        `HH:MM:SS,mmm --> HH:MM:SS,mmm`, the trimmed text and a blank line.
        An empty sequence renders as an empty string.
        """
        blocks = []
        for index, segment in enumerate(segments, start=1):
            if segment.end < segment.start:
                raise FormattingError(
                    f"Segment {index} ends before it starts ({segment.start} > {segment.end})"
                )
            blocks.append(
                f"{index}\n"
                f"{format_time_srt(segment.start)} --> {format_time_srt(segment.end)}\n"
                f"{segment.text.strip()}\n\n"
            )
        logger.debug(f"Serialized {len(blocks)} SRT cues")
        return "".join(blocks)
