"""CLI module for flatten-bom.

This module provides the command-line interface of flatten-bom.
It supports both CLI arguments and environment variables for configuration.
"""

from .main import (
    Config,
    TransitiveConfig,
    build_config,
    build_transitive_config,
    cli,
    main,
    run_pipeline,
    run_transitive,
)

__all__ = [
    "cli",
    "main",
    "Config",
    "TransitiveConfig",
    "build_config",
    "build_transitive_config",
    "run_pipeline",
    "run_transitive",
]
