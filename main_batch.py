#!/usr/bin/env python3
"""
StreamSub Batch Processing Entry Point

Transcribes all audio files in a specified directory, ordered by size,
writing one SRT file per input into a Subs subfolder.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Tuple

from tqdm import tqdm

from streamsub.config_loader import ConfigLoader, PROVIDERS
from streamsub.log_setup import setup_logging
from streamsub.cli import apply_overrides, build_generator
from streamsub.exceptions import StreamSubError, ConfigurationError, FileSystemError
from streamsub.utils import ensure_dir_exists

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = ('.wav', '.mp3', '.m4a', '.flac', '.ogg', '.aac', '.opus')

def find_and_sort_audio(input_dir: str) -> List[Tuple[str, int]]:
    """
    Finds all audio files in the input directory and sorts them by size.

    Args:
        input_dir: The directory to search for audio files.

    Returns:
        A list of (filepath, filesize) tuples, smallest file first.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    audio_files = []
    logger.info(f"Scanning directory for audio files: {input_dir}")
    for filename in os.listdir(input_dir):
        if filename.lower().endswith(AUDIO_EXTENSIONS):
            filepath = os.path.join(input_dir, filename)
            try:
                if os.path.isfile(filepath):
                    audio_files.append((filepath, os.path.getsize(filepath)))
            except OSError as e:
                logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    audio_files.sort(key=lambda item: (item[1], item[0]))
    logger.info(f"Found {len(audio_files)} audio files. Sorted by size (smallest first).")
    return audio_files


def run_batch_processing(argv=None):
    """Parses arguments, sets up, and runs the batch subtitle generation."""
    parser = argparse.ArgumentParser(
        description="StreamSub Batch: Generate SRT subtitles for all audio files in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-i", "--input-dir",
        required=True,
        help="Directory containing the input audio files."
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

    args = parser.parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir='logs', log_file='streamsub_batch_init.log')

    try:
        config = ConfigLoader().load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}", exc_info=True)
        sys.exit(1)

    # Batch runs always name outputs after their inputs
    config['output_name'] = None
    setup_logging(log_level=log_level, log_dir=config['log_dir'], log_file='streamsub_batch.log')
    logger.info("Logging re-configured with settings from config file for batch processing.")

    try:
        sorted_audio = [item[0] for item in find_and_sort_audio(args.input_dir)]
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        sys.exit(1)
    if not sorted_audio:
        logger.warning(f"No audio files found in {args.input_dir}. Exiting.")
        sys.exit(0)

    subs_dir = os.path.join(args.input_dir, "Subs")
    try:
        ensure_dir_exists(subs_dir)
    except FileSystemError as e:
        logger.critical(f"Could not create output directory: {e}")
        sys.exit(1)

    # The model is loaded once and shared by every file
    try:
        apply_overrides(config, args)
        generator = build_generator(config, subs_dir)
    except StreamSubError as e:
        logger.critical(f"Failed to initialize StreamSub components: {e}", exc_info=True)
        sys.exit(1)
    except Exception as e:
        logger.critical(f"An unexpected error occurred during component initialization: {e}", exc_info=True)
        sys.exit(1)

    total_files = len(sorted_audio)
    files_processed = 0
    files_failed = 0
    batch_start_time = time.time()

    logger.info(f"--- Starting Batch Subtitle Generation for {total_files} files ---")

    with tqdm(total=total_files, unit="file", desc="Starting Batch") as pbar:
        for audio_path in sorted_audio:
            audio_filename = os.path.basename(audio_path)
            pbar.set_description(f"Processing: {audio_filename[:30]}...")
            try:
                file_start_time = time.time()
                destination = generator.generate(audio_path)
                logger.info(f"Subtitles for {audio_filename} saved to {destination} ({time.time() - file_start_time:.2f}s).")
                files_processed += 1
            except (StreamSubError, FileNotFoundError) as e:
                logger.error(f"StreamSub failed for '{audio_filename}': {e}")
                files_failed += 1
            except KeyboardInterrupt:
                logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
                sys.exit(1)
            finally:
                pbar.update(1)

    logger.info("--- Batch Subtitle Generation Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {files_processed}/{total_files} files")
    logger.info(f"Failed: {files_failed}/{total_files} files")

    sys.exit(1 if files_failed > 0 else 0)


if __name__ == "__main__":
    run_batch_processing()
