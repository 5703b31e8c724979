"""Turns a stream of recognizer hypotheses into timed subtitle segments."""

import logging
import threading
from typing import List, Optional, Sequence

from .models import Segment, SessionState
from .recognizer import RecognitionEngine
from .exceptions import TranscriptionCancelled
from .utils import is_blank

logger = logging.getLogger(__name__)


class SegmentationEngine:
    """
    Drives a streaming recognizer over fixed-size chunks of audio.

    Each chunk is fed to the engine, decoded as far as the engine allows and
    the current hypothesis is read back. The open segment is flushed when the
    engine reports an endpoint or the last chunk has been fed, whichever
    comes first, and at most once per chunk.

    One instance drives one pass at a time; it is not re-entrant.
    """

    def __init__(self, engine: RecognitionEngine):
        self.engine = engine

    def transcribe(
        self,
        samples: Sequence[float],
        sample_rate: int,
        chunk_seconds: float,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Segment]:
        """
        Segments a whole sample sequence.

        Args:
            samples: Normalized mono samples.
            sample_rate: Sample rate of `samples` in Hz.
            chunk_seconds: Duration of each chunk fed to the engine.
            cancel_event: Checked before every chunk; when set the pass stops.

        Returns:
            Segments ordered by start time, never overlapping.

        Raises:
            ValueError: If sample_rate or chunk_seconds is not positive.
            TranscriptionCancelled: If cancel_event was set mid-pass.
            EngineError: If the engine fails; no partial result is returned.
        """
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        if chunk_seconds <= 0:
            raise ValueError(f"chunk_seconds must be positive, got {chunk_seconds}")

        total = len(samples)
        segments: List[Segment] = []
        if total == 0:
            logger.warning("No samples to transcribe.")
            return segments

        chunk_size = max(1, int(sample_rate * chunk_seconds))
        logger.info(
            f"Segmenting {total} samples ({total / sample_rate:.2f}s) in chunks of {chunk_size} samples"
        )

        state = SessionState()
        with self.engine.session() as session:
            while state.cursor < total:
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(f"Transcription cancelled at {state.cursor / sample_rate:.2f}s")
                    raise TranscriptionCancelled(
                        f"Transcription cancelled at sample {state.cursor} of {total}"
                    )
                end = min(state.cursor + chunk_size, total)
                self._process_chunk(session, samples[state.cursor:end], end, total, sample_rate, state, segments)
                state.cursor = end

        logger.info(f"Segmentation produced {len(segments)} segments.")
        return segments

    def _process_chunk(
        self,
        session,
        chunk: Sequence[float],
        end: int,
        total: int,
        sample_rate: int,
        state: SessionState,
        segments: List[Segment],
    ) -> None:
        engine = self.engine
        engine.accept_waveform(session, chunk, sample_rate)
        while engine.is_ready(session):
            engine.decode_step(session)

        text = engine.get_result(session).text
        if not is_blank(text):
            if not state.has_text:
                state.segment_start = state.cursor / sample_rate
            # The result is the whole hypothesis so far, not a delta
            state.pending_text = text

        if engine.is_endpoint(session) or end == total:
            self._flush(session, end / sample_rate, state, segments)

    def _flush(self, session, end_time: float, state: SessionState, segments: List[Segment]) -> None:
        if state.has_text:
            segment = Segment(start=state.segment_start, end=end_time, text=state.pending_text.strip())
            segments.append(segment)
            logger.debug(f"Segment {len(segments)}: {segment.start:.2f}-{segment.end:.2f} '{segment.text[:50]}'")
        self.engine.reset_session(session)
        state.pending_text = ""
