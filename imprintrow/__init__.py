"""A binary row serialization format with field-level access, projection and merging."""

__version__ = "0.1.0"
__all__ = ["errors", "varint", "model", "record", "writer", "ops"]