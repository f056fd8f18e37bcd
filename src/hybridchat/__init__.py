"""hybridchat: document-grounded chat backend with hybrid context and tool retrieval."""

__version__ = "0.1.0"
