"""Harvest JLPT vocabulary, pronunciation audio and collocations from jisho.org."""

__version__ = "0.1.0"
