"""Story Studio — multi-part story, description and narration generator."""

__version__ = "1.0.0"
