"""Pydantic configuration models."""

from .config import DatabaseConfig, ServerConfig

__all__ = [
    "DatabaseConfig",
    "ServerConfig",
]
