"""Handles loading configuration from YAML files."""

import yaml
import os
import logging
from typing import Any, Dict
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'sample_rate': 16000,
    'chunk_seconds': 30.0,
    'model_type': 'transducer',
    'tokens': None,
    'encoder': None,
    'decoder': None,
    'joiner': None,
    'model': None,
    'num_threads': 2,
    'provider': 'cpu',
    'decoding_method': 'greedy_search',
    'feature_dim': 80,
    'enable_endpoint': True,
    'rule1_min_trailing_silence': 2.4,
    'rule2_min_trailing_silence': 1.2,
    'rule3_min_utterance_length': 20.0,
    'output_name': None,
    'ffmpeg_path': None,
    'log_dir': 'logs',
    'log_file': 'streamsub.log',
}

MODEL_TYPES = ('transducer', 'zipformer2_ctc')
PROVIDERS = ('cpu', 'cuda', 'coreml')


class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Keys absent from the file take their value from DEFAULT_CONFIG.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the merged configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML, if there
                              are other reading errors, or if a value is invalid.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except IOError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")

        config = dict(DEFAULT_CONFIG)
        config.update(loaded)
        validate_config(config)
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config


def validate_config(config: dict) -> None:
    """
    Checks the values the transcription pass depends on.

    Raises:
        ConfigurationError: On the first invalid value found.
    """
    sample_rate = config.get('sample_rate')
    if isinstance(sample_rate, bool) or not isinstance(sample_rate, int) or sample_rate <= 0:
        raise ConfigurationError(f"'sample_rate' must be a positive integer, got {sample_rate!r}")

    chunk_seconds = config.get('chunk_seconds')
    if isinstance(chunk_seconds, bool) or not isinstance(chunk_seconds, (int, float)) or chunk_seconds <= 0:
        raise ConfigurationError(f"'chunk_seconds' must be a positive number, got {chunk_seconds!r}")

    num_threads = config.get('num_threads')
    if isinstance(num_threads, bool) or not isinstance(num_threads, int) or num_threads <= 0:
        raise ConfigurationError(f"'num_threads' must be a positive integer, got {num_threads!r}")

    if config.get('model_type') not in MODEL_TYPES:
        raise ConfigurationError(
            f"Unsupported 'model_type' {config.get('model_type')!r}. Choose one of: {', '.join(MODEL_TYPES)}"
        )

    if config.get('provider') not in PROVIDERS:
        raise ConfigurationError(
            f"Unsupported 'provider' {config.get('provider')!r}. Choose one of: {', '.join(PROVIDERS)}"
        )
