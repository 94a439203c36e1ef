"""Decoder and encoder for RE Engine RSZ data and the files that embed it."""

__version__ = "0.1.0"
