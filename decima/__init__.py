"""Reading, decrypting and decoding Decima engine archives and their core objects."""

__version__ = "0.1.0"