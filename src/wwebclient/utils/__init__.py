"""Shared utility helpers."""

from .logging import configure_logging, format_payload_preview, get_logger

__all__ = ["configure_logging", "format_payload_preview", "get_logger"]
