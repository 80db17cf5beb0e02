"""Pydantic payload models used across the campaign kit service."""

from .payloads import SourceAsset  # noqa: F401

__all__ = ["SourceAsset"]
