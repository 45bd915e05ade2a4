"""newsrag: retrieval-augmented question answering over a growing news corpus."""

__version__ = "0.1.0"
