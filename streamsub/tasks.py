"""Runs whole subtitle generation passes on a dedicated background worker."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Optional

from .subtitle_generator import SubtitleGenerator

logger = logging.getLogger(__name__)

CompletionCallback = Callable[["Future[str]"], None]


class TranscriptionTask:
    """
    Dispatches SubtitleGenerator.generate to a single worker thread.

    Passes queue behind each other, so the recognizer session is never used
    by two passes at once. Results and errors travel back through the
    returned Future; no state is shared with the caller while a pass runs.
    """

    def __init__(self, generator: SubtitleGenerator):
        self.generator = generator
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="streamsub")
        self._pending: Dict["Future[str]", threading.Event] = {}
        self._lock = threading.Lock()

    def submit(self, audio_path: str, on_complete: Optional[CompletionCallback] = None) -> "Future[str]":
        """
        Queues a pass for `audio_path`.

        Args:
            audio_path: Audio file to transcribe.
            on_complete: Called with the finished Future, on the worker thread
                         (or immediately if the pass already finished).

        Returns:
            A Future resolving to the stored subtitle location.
        """
        cancel_event = threading.Event()
        logger.info(f"Queued transcription of {audio_path}")
        with self._lock:
            future = self._executor.submit(self.generator.generate, audio_path, cancel_event)
            self._pending[future] = cancel_event
        future.add_done_callback(self._forget)
        if on_complete is not None:
            future.add_done_callback(on_complete)
        return future

    def _forget(self, future: "Future[str]") -> None:
        with self._lock:
            self._pending.pop(future, None)

    def cancel(self) -> None:
        """Asks every queued or running pass to stop before its next chunk."""
        with self._lock:
            events = list(self._pending.values())
        logger.info(f"Cancellation requested for {len(events)} pass(es).")
        for event in events:
            event.set()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "TranscriptionTask":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.cancel()
        self.shutdown(wait=True)
