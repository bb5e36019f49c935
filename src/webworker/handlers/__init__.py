"""
Body writers.

    from webworker.handlers import ContentWriter

    writer = ContentWriter(config)
    writer.write(conn.wfile, context)
"""

from .content import ContentWriter, TagSubstituter, FALLBACK_BODY

__all__ = [
    "ContentWriter",
    "TagSubstituter",
    "FALLBACK_BODY",
]
