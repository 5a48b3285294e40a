"""Decoding, encoding and validation helpers for 3MF slice stacks, meshes and UUIDs."""

__version__ = "0.1.0"