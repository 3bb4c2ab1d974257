"""Streamwave: strip or add the headers legacy game audio files carry."""

__version__ = "1.0.0"
