"""Multi-strategy search and safe bulk replace for codebases."""

__version__ = "0.1.0"
