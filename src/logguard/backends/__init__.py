"""Backends for LogGuard output generation."""

from .source_generator import generate_expression, generate_source, save_source_file

__all__ = ["generate_expression", "generate_source", "save_source_file"]
