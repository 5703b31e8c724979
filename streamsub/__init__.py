"""StreamSub: subtitle generation with a streaming speech recognizer."""

__version__ = "0.1.0"
