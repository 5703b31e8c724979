"""Command-Line Interface handler for StreamSub."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config_loader import ConfigLoader, validate_config, PROVIDERS
from .log_setup import setup_logging
from .audio_decoder import AudioDecoder
from .recognizer import SherpaOnnxEngine
from .segmenter import SegmentationEngine
from .storage import FileStorageSink
from .subtitle_generator import SubtitleGenerator
from .tasks import TranscriptionTask
from .exceptions import StreamSubError, ConfigurationError

logger = logging.getLogger(__name__)


def apply_overrides(config: dict, args: argparse.Namespace) -> dict:
    """Copies CLI overrides into the configuration and re-validates it."""
    overrides = {
        'chunk_seconds': getattr(args, 'chunk_seconds', None),
        'num_threads': getattr(args, 'num_threads', None),
        'provider': getattr(args, 'provider', None),
        'output_name': getattr(args, 'output_name', None),
    }
    for key, value in overrides.items():
        if value is not None:
            logger.info(f"Overriding {key} from config with CLI argument: {value}")
            config[key] = value
    validate_config(config)
    return config


def build_generator(config: dict, output_dir: str) -> SubtitleGenerator:
    """Instantiates the pipeline components described by `config`."""
    logger.info("Initializing StreamSub components...")
    audio_decoder = AudioDecoder(
        sample_rate=config['sample_rate'],
        ffmpeg_path=config.get('ffmpeg_path')
    )
    engine = SherpaOnnxEngine.from_config(config)
    generator = SubtitleGenerator(
        config=config,
        audio_decoder=audio_decoder,
        segmenter=SegmentationEngine(engine),
        storage=FileStorageSink(output_dir),
    )
    logger.info("Components initialized successfully.")
    return generator


class CLIHandler:
    """Parses arguments and orchestrates the StreamSub process."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            description="StreamSub: Generate SRT subtitles for an audio file with a streaming recognizer.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        parser.add_argument(
            "-a", "--audio",
            required=True,
            help="Path to the input audio file."
        )
        parser.add_argument(
            "-o", "--output-dir",
            required=True,
            help="Directory to save the generated subtitle file (.srt)."
        )
        parser.add_argument(
            "-c", "--config",
            default="config.yaml",
            help="Path to the configuration YAML file."
        )
        parser.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )
        parser.add_argument(
            "--chunk-seconds",
            type=float,
            default=None,
            help="Override the duration of audio fed to the recognizer per step."
        )
        parser.add_argument(
            "--num-threads",
            type=int,
            default=None,
            help="Override the number of recognizer threads."
        )
        parser.add_argument(
            "--provider",
            default=None,
            choices=list(PROVIDERS),
            help="Override the onnxruntime execution provider."
        )
        parser.add_argument(
            "--output-name",
            default=None,
            help="Name of the subtitle file. Defaults to the audio file name with .srt."
        )
        return parser

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the generator."""
        args = self.parser.parse_args(argv)

        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        setup_logging(log_level=log_level, log_dir='logs', log_file='streamsub_init.log')

        try:
            config = ConfigLoader().load_config(args.config)
        except ConfigurationError as e:
            logger.critical(f"Failed to load configuration from {args.config}: {e}", exc_info=True)
            sys.exit(1)
        except FileNotFoundError:
            logger.critical(f"Configuration file not found: {args.config}", exc_info=True)
            sys.exit(1)

        setup_logging(log_level=log_level, log_dir=config['log_dir'], log_file=config['log_file'])
        logger.info("Logging re-configured with settings from config file.")

        if not os.path.isfile(args.audio):
            logger.critical(f"Input audio file not found or is not a file: {args.audio}")
            sys.exit(1)

        try:
            apply_overrides(config, args)
            generator = build_generator(config, args.output_dir)

            with TranscriptionTask(generator) as task:
                future = task.submit(args.audio)
                destination = future.result()
            logger.info(f"Subtitles saved to: {destination}")
            logger.info("StreamSub finished successfully.")
            sys.exit(0)

        except StreamSubError as e:
            logger.error(f"A StreamSub error occurred: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            sys.exit(1)
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            sys.exit(2)


def main() -> None:
    CLIHandler().run()
