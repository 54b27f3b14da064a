"""Adapters - I/O implementations of ports."""

from .file_feedback import FileFeedbackStore
from .json_files import JsonFileRepository

__all__ = [
    "FileFeedbackStore",
    "JsonFileRepository",
]
