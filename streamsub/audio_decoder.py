"""Decodes audio files into normalized mono PCM samples using ffmpeg."""

import ffmpeg
import numpy as np
import os
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Full scale of signed 16-bit PCM
PCM16_SCALE = 32768.0

class AudioDecoder:
    """Decodes any ffmpeg-readable audio container to float32 samples."""

    def __init__(self, sample_rate: int = 16000, ffmpeg_path: Optional[str] = None):
        """
        Initializes the AudioDecoder.

        Args:
            sample_rate: Target sample rate of the decoded samples.
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
        """
        self.sample_rate = sample_rate
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd} (target rate {self.sample_rate} Hz)")

    def _run_ffmpeg(self, audio_filepath: str) -> bytes:
        out, _ = (
            ffmpeg
            .input(audio_filepath)
            .output('pipe:', format='s16le', acodec='pcm_s16le', ac=1, ar=self.sample_rate)
            .run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
        )
        return out

    def decode(self, audio_filepath: str) -> np.ndarray:
        """
        Decodes an audio file to mono float32 samples in [-1, 1].

        Args:
            audio_filepath: Path to the input audio file.

        Returns:
            The decoded samples at self.sample_rate. An empty array means the
            file could not be decoded.

        Raises:
            FileNotFoundError: If the input audio file does not exist.
        """
        logger.info(f"Decoding audio: {audio_filepath}")
        if not os.path.exists(audio_filepath):
            raise FileNotFoundError(f"Input audio file not found: {audio_filepath}")

        try:
            raw = self._run_ffmpeg(audio_filepath)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg failed to decode {audio_filepath}: {stderr_output}")
            return np.zeros(0, dtype=np.float32)

        # A trailing odd byte is not a whole sample
        usable = len(raw) - (len(raw) % 2)
        samples = np.frombuffer(raw[:usable], dtype='<i2').astype(np.float32) / PCM16_SCALE
        logger.info(
            f"Decoded {len(samples)} samples ({len(samples) / self.sample_rate:.2f}s) from {audio_filepath}"
        )
        return samples
