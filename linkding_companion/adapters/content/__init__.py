"""Readable-content extraction adapters."""

from linkding_companion.adapters.content.extractor import (
    ContentExtractorProtocol,
    ReadabilityCliExtractor,
    TrafilaturaExtractor,
    build_extractor,
)

__all__ = [
    "ContentExtractorProtocol",
    "ReadabilityCliExtractor",
    "TrafilaturaExtractor",
    "build_extractor",
]
