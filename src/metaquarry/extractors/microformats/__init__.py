"""Microformats2 parsing, including classic class names."""

from .parser import MicroformatsExtractor, MicroformatsParser, items_of_type, iter_items

__all__ = ["MicroformatsExtractor", "MicroformatsParser", "items_of_type", "iter_items"]
