"""Console output for voicetotext."""

from .console import ConsolePrinter

__all__ = ["ConsolePrinter"]
