"""Streaming speech recognition engines consumed by the segmentation pass."""

import logging
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from .models import RecognitionResult
from .exceptions import EngineError, ConfigurationError

logger = logging.getLogger(__name__)


class RecognitionEngine(ABC):
    """
    Abstract base class for session-oriented streaming recognizers.

    A session is the engine's per-stream decoding state. Callers should use
    session() rather than pairing create_session/release_session by hand.
    """

    @abstractmethod
    def create_session(self) -> Any:
        """Creates a new decoding session and returns its handle."""

    @abstractmethod
    def accept_waveform(self, session: Any, samples: Sequence[float], sample_rate: int) -> None:
        """Feeds normalized samples to the session."""

    @abstractmethod
    def is_ready(self, session: Any) -> bool:
        """Whether another decode step would make progress."""

    @abstractmethod
    def decode_step(self, session: Any) -> None:
        """Advances decoding by one unit of work."""

    @abstractmethod
    def get_result(self, session: Any) -> RecognitionResult:
        """Returns the full current hypothesis for the open utterance."""

    @abstractmethod
    def is_endpoint(self, session: Any) -> bool:
        """Whether an utterance boundary has been detected."""

    @abstractmethod
    def reset_session(self, session: Any) -> None:
        """Starts a fresh utterance without discarding the session."""

    @abstractmethod
    def release_session(self, session: Any) -> None:
        """Releases the session's resources. Must be called exactly once."""

    @contextmanager
    def session(self) -> Iterator[Any]:
        """Yields a new session and releases it on every exit path."""
        handle = self.create_session()
        try:
            yield handle
        finally:
            self.release_session(handle)


class SherpaOnnxEngine(RecognitionEngine):
    """Implements the session protocol on top of a sherpa-onnx OnlineRecognizer."""

    def __init__(self, recognizer: Any):
        """
        Initializes the SherpaOnnxEngine.

        Args:
            recognizer: A sherpa_onnx.OnlineRecognizer (or an object with the
                        same create_stream/is_ready/decode_stream/get_result/
                        is_endpoint/reset methods).
        """
        self.recognizer = recognizer
        self._active_sessions = set()

    @classmethod
    def from_config(cls, config: dict) -> "SherpaOnnxEngine":
        """
        Builds an engine from configuration settings.

        Args:
            config: Configuration dictionary (see config_loader.DEFAULT_CONFIG).

        Raises:
            ConfigurationError: If required model files are missing.
            EngineError: If sherpa-onnx fails to load the model.
        """
        model_type = config.get('model_type', 'transducer')
        if model_type == 'transducer':
            required = ('tokens', 'encoder', 'decoder', 'joiner')
        else:
            required = ('tokens', 'model')
        for key in required:
            path = config.get(key)
            if not path or not os.path.isfile(path):
                raise ConfigurationError(f"Model file '{key}' not found for {model_type} model: {path}")

        try:
            import sherpa_onnx
        except ImportError as e:
            raise ImportError("sherpa-onnx not installed. Install with: pip install sherpa-onnx") from e

        common = dict(
            num_threads=config.get('num_threads', 2),
            sample_rate=config.get('sample_rate', 16000),
            feature_dim=config.get('feature_dim', 80),
            enable_endpoint_detection=config.get('enable_endpoint', True),
            rule1_min_trailing_silence=config.get('rule1_min_trailing_silence', 2.4),
            rule2_min_trailing_silence=config.get('rule2_min_trailing_silence', 1.2),
            rule3_min_utterance_length=config.get('rule3_min_utterance_length', 20.0),
            decoding_method=config.get('decoding_method', 'greedy_search'),
            provider=config.get('provider', 'cpu'),
        )

        logger.info(f"Loading sherpa-onnx {model_type} model (provider={common['provider']}, threads={common['num_threads']})")
        try:
            if model_type == 'transducer':
                recognizer = sherpa_onnx.OnlineRecognizer.from_transducer(
                    tokens=config['tokens'],
                    encoder=config['encoder'],
                    decoder=config['decoder'],
                    joiner=config['joiner'],
                    **common
                )
            else:
                recognizer = sherpa_onnx.OnlineRecognizer.from_zipformer2_ctc(
                    tokens=config['tokens'],
                    model=config['model'],
                    **common
                )
        except Exception as e:
            logger.error(f"Failed to load sherpa-onnx model: {e}", exc_info=True)
            raise EngineError(f"Failed to load sherpa-onnx {model_type} model: {e}") from e

        logger.info("sherpa-onnx model loaded successfully.")
        return cls(recognizer)

    def _check(self, session: Any) -> None:
        if id(session) not in self._active_sessions:
            raise EngineError("Session is not active (never created or already released).")

    def create_session(self) -> Any:
        try:
            stream = self.recognizer.create_stream()
        except Exception as e:
            raise EngineError(f"Failed to create recognition stream: {e}") from e
        self._active_sessions.add(id(stream))
        logger.debug("Created recognition session %#x", id(stream))
        return stream

    def accept_waveform(self, session: Any, samples: Sequence[float], sample_rate: int) -> None:
        self._check(session)
        try:
            session.accept_waveform(sample_rate, samples)
        except Exception as e:
            raise EngineError(f"accept_waveform failed: {e}") from e

    def is_ready(self, session: Any) -> bool:
        self._check(session)
        try:
            return bool(self.recognizer.is_ready(session))
        except Exception as e:
            raise EngineError(f"is_ready failed: {e}") from e

    def decode_step(self, session: Any) -> None:
        self._check(session)
        try:
            self.recognizer.decode_stream(session)
        except Exception as e:
            raise EngineError(f"decode_stream failed: {e}") from e

    def get_result(self, session: Any) -> RecognitionResult:
        self._check(session)
        try:
            result = self.recognizer.get_result(session)
        except Exception as e:
            raise EngineError(f"get_result failed: {e}") from e
        # Older bindings return a result object instead of the text
        text = result if isinstance(result, str) else getattr(result, 'text', '')
        return RecognitionResult(text=text or "")

    def is_endpoint(self, session: Any) -> bool:
        self._check(session)
        try:
            return bool(self.recognizer.is_endpoint(session))
        except Exception as e:
            raise EngineError(f"is_endpoint failed: {e}") from e

    def reset_session(self, session: Any) -> None:
        self._check(session)
        try:
            self.recognizer.reset(session)
        except Exception as e:
            raise EngineError(f"reset failed: {e}") from e

    def release_session(self, session: Any) -> None:
        self._check(session)
        self._active_sessions.discard(id(session))
        logger.debug("Released recognition session %#x", id(session))
