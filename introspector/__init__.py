"""
Introspector — a guided, multi-turn reflection dialogue with a language model.
Streams the guide's replies, notices when an insight has landed and distils
the transcript into insights and suggested note links.
"""

__version__ = "0.1.0"
