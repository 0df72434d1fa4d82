"""Typed structured-log fields, pooled byte buffers and a registry of named encoders."""

__version__ = "0.1.0"

__all__ = ["anyfield", "array", "buffer", "encoder", "error", "field"]