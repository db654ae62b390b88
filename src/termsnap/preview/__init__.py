"""Dump preview renderer module."""

from .renderer import WindowRenderer, default_pairs

__all__ = [
    "WindowRenderer",
    "default_pairs",
]
