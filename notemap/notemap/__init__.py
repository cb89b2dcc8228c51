"""notemap - mind-map graph engine for linked personal notes."""

__version__ = "0.1.0"
