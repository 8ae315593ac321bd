"""Protocol Buffers wire-format primitives: varints, keys, scalar and composite field codecs."""

__version__ = "0.1.0"

__all__ = [
    "composite",
    "delimiters",
    "errors",
    "scalars",
    "varint",
    "wire",
]