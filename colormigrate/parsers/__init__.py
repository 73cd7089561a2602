"""Parser modules for colormigrate."""

from .dart_parser import DartParser, parse_dart

__all__ = ["DartParser", "parse_dart"]
