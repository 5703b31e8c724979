"""Data models for StreamSub."""

from dataclasses import dataclass, field
from typing import List, Optional

@dataclass(frozen=True)
class Segment:
    """A finalized subtitle cue: start/end offsets in seconds and its text."""
    start: float
    end: float
    text: str

@dataclass
class RecognitionResult:
    """Current best hypothesis of the engine for the open utterance."""
    text: str = ""

@dataclass
class SessionState:
    """Progress of one segmentation pass over one sample sequence."""
    cursor: int = 0
    pending_text: str = ""
    segment_start: float = 0.0

    @property
    def has_text(self) -> bool:
        return bool(self.pending_text.strip())

@dataclass
class TranscriptionResult:
    """Holds the structured output of one transcription pass."""
    sample_rate: int
    duration: float
    segments: List[Segment] = field(default_factory=list)
    source_path: Optional[str] = None
