#!/usr/bin/env python3
"""
StreamSub Entry Point Script

This script initializes the CLI handler and runs the subtitle generation process.
"""

from streamsub.cli import CLIHandler

if __name__ == "__main__":
    cli = CLIHandler()
    cli.run()
