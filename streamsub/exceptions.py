"""Custom Exceptions for the StreamSub application."""

class StreamSubError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(StreamSubError):
    """Exception raised for errors in configuration loading."""
    pass

class AudioDecodeError(StreamSubError):
    """Exception raised when an audio file decodes to no samples."""
    pass

class EngineError(StreamSubError):
    """Exception raised when the speech recognition engine fails."""
    pass

class TranscriptionCancelled(StreamSubError):
    """Exception raised when a running transcription pass is cancelled."""
    pass

class FormattingError(StreamSubError):
    """Exception raised for errors during subtitle formatting."""
    pass

class StorageError(StreamSubError):
    """Exception raised when a subtitle file cannot be persisted."""
    pass

class FileSystemError(StreamSubError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
