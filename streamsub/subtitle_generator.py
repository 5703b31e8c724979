"""Orchestrates the audio-to-subtitle pipeline."""

import logging
import os
import threading
import time
from typing import Optional

from .audio_decoder import AudioDecoder
from .segmenter import SegmentationEngine
from .storage import StorageSink
from .subtitle_formatter import SubtitleFormatter, SRTFormatter
from .models import TranscriptionResult
from .exceptions import StreamSubError, AudioDecodeError

logger = logging.getLogger(__name__)

class SubtitleGenerator:
    """
    Manages the end-to-end process of generating subtitles for an audio file.
    """

    def __init__(
        self,
        config: dict,
        audio_decoder: AudioDecoder,
        segmenter: SegmentationEngine,
        storage: StorageSink,
        formatter: Optional[SubtitleFormatter] = None,
    ):
        """
        Initializes the SubtitleGenerator.

        Args:
            config: A dictionary containing configuration settings.
            audio_decoder: Produces samples at config['sample_rate'].
            segmenter: Segmentation engine wrapping the recognizer.
            storage: Destination of the serialized subtitles.
            formatter: Subtitle serializer, SRT when omitted.
        """
        self.config = config
        self.audio_decoder = audio_decoder
        self.segmenter = segmenter
        self.storage = storage
        self.formatter = formatter or SRTFormatter()

        self.sample_rate = config.get('sample_rate', 16000)
        self.chunk_seconds = config.get('chunk_seconds', 30.0)
        if audio_decoder.sample_rate != self.sample_rate:
            raise StreamSubError(
                f"Decoder sample rate {audio_decoder.sample_rate} does not match configured {self.sample_rate}"
            )

    def _get_output_name(self, audio_path: str) -> str:
        """Determines the output filename from config or the audio path."""
        configured = self.config.get('output_name')
        if configured:
            return configured
        base_name = os.path.splitext(os.path.basename(audio_path))[0]
        return f"{base_name}.{self.formatter.file_extension}"

    def transcribe(self, audio_path: str, cancel_event: Optional[threading.Event] = None) -> TranscriptionResult:
        """
        Decodes and segments one audio file.

        Raises:
            FileNotFoundError: If the audio file is not found.
            AudioDecodeError: If the file decodes to no samples. The
                              recognizer is not touched in that case.
        """
        samples = self.audio_decoder.decode(audio_path)
        if len(samples) == 0:
            raise AudioDecodeError(f"Decode failed: no audio samples in {audio_path}")

        segments = self.segmenter.transcribe(
            samples, self.sample_rate, self.chunk_seconds, cancel_event=cancel_event
        )
        return TranscriptionResult(
            sample_rate=self.sample_rate,
            duration=len(samples) / self.sample_rate,
            segments=segments,
            source_path=audio_path,
        )

    def generate(self, audio_path: str, cancel_event: Optional[threading.Event] = None) -> str:
        """
        Executes the full subtitle generation pipeline for a single audio file.

        Args:
            audio_path: Path to the input audio file.
            cancel_event: Optional event that stops the pass between chunks.

        Returns:
            The location of the stored subtitle file.

        Raises:
            StreamSubError: For any decoding, engine, formatting or storage error.
            FileNotFoundError: If the input audio is not found.
        """
        start_time = time.time()
        logger.info(f"--- Starting StreamSub process for: {audio_path} ---")

        try:
            logger.info("Step 1: Decoding and transcribing audio...")
            result = self.transcribe(audio_path, cancel_event=cancel_event)
            if not result.segments:
                logger.warning(f"No speech recognized in {audio_path}; the subtitle file will be empty.")
            else:
                logger.info(f"Transcription complete. Found {len(result.segments)} segments in {result.duration:.2f}s of audio.")

            logger.info("Step 2: Serializing subtitles...")
            text = self.formatter.serialize(result.segments)

            logger.info("Step 3: Storing subtitles...")
            destination = self.storage.write(
                self._get_output_name(audio_path),
                self.formatter.mime_type,
                text.encode('utf-8'),
            )

            end_time = time.time()
            logger.info(f"--- StreamSub process completed successfully in {end_time - start_time:.2f} seconds ---")
            return destination

        except (StreamSubError, FileNotFoundError) as e:
            logger.error(f"StreamSub process failed: {e}", exc_info=False)
            raise
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred during subtitle generation: {e}", exc_info=True)
            raise StreamSubError(f"An unexpected critical error occurred: {e}") from e
