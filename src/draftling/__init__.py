"""draftling: an immutable rich-text document model."""

__version__ = "0.1.0"
