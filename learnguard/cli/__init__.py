"""CLI Module - Command-line interface for LearnGuard.

This module provides a CLI built with Typer and Rich.

Usage:
    learnguard --help                          Show all commands
    learnguard insights risks stats.json       Detect learning risks
    learnguard insights alerts stats.json      Run an analysis cycle and show alerts
    learnguard insights path stats.json        Generate an optimized learning path
    learnguard insights report stats.json -d 7 Analytics report for the last week
    learnguard jobs list                       Show scheduled background jobs
    learnguard serve                           Run the API server
"""

from learnguard.cli.main import app, main

__all__ = ["app", "main"]
