"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
import pytest

from streamsub.exceptions import EngineError
from streamsub.models import RecognitionResult
from streamsub.recognizer import RecognitionEngine

SAMPLE_RATE = 16000


class FakeEngine(RecognitionEngine):
    """Scripted engine: one (text, endpoint) pair per fed chunk.

    Chunks past the end of the script read back as ("", False).
    """

    def __init__(
        self,
        script: Sequence[Tuple[str, bool]] = (),
        ready_steps: int = 1,
        fail_on: Optional[str] = None,
    ):
        self.script = list(script)
        self.ready_steps = ready_steps
        self.fail_on = fail_on
        self.calls: List[str] = []
        self.fed: List[int] = []
        self.created = 0
        self.released = 0
        self._chunk = -1
        self._ready_left = 0

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name == self.fail_on:
            raise EngineError(f"{name} exploded")

    def _current(self) -> Tuple[str, bool]:
        if 0 <= self._chunk < len(self.script):
            return self.script[self._chunk]
        return ("", False)

    def create_session(self) -> Any:
        self._record("create_session")
        self.created += 1
        return object()

    def accept_waveform(self, session: Any, samples: Sequence[float], sample_rate: int) -> None:
        self._record("accept_waveform")
        self.fed.append(len(samples))
        self._chunk += 1
        self._ready_left = self.ready_steps

    def is_ready(self, session: Any) -> bool:
        self._record("is_ready")
        return self._ready_left > 0

    def decode_step(self, session: Any) -> None:
        self._record("decode_step")
        self._ready_left -= 1

    def get_result(self, session: Any) -> RecognitionResult:
        self._record("get_result")
        return RecognitionResult(text=self._current()[0])

    def is_endpoint(self, session: Any) -> bool:
        self._record("is_endpoint")
        return self._current()[1]

    def reset_session(self, session: Any) -> None:
        self._record("reset_session")

    def release_session(self, session: Any) -> None:
        self._record("release_session")
        self.released += 1


class FakeDecoder:
    """Stands in for AudioDecoder; returns preset samples."""

    def __init__(self, samples, sample_rate: int = SAMPLE_RATE):
        self.samples = samples
        self.sample_rate = sample_rate
        self.decoded: List[str] = []

    def decode(self, audio_filepath: str):
        self.decoded.append(audio_filepath)
        return self.samples


def seconds_of_silence(seconds: float, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    return np.zeros(int(seconds * sample_rate), dtype=np.float32)


@pytest.fixture
def restore_root_logging():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def base_config(tmp_path) -> dict:
    from streamsub.config_loader import DEFAULT_CONFIG

    config = dict(DEFAULT_CONFIG)
    config["log_dir"] = str(tmp_path / "logs")
    return config
