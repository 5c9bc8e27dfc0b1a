"""Markdown parsing helpers feeding the formatter."""

from .markdown import build_parser, detect_frontmatter_lines, parse_document

__all__ = ["build_parser", "detect_frontmatter_lines", "parse_document"]
