"""Bot package - Matrix client and transport adapter."""
from .client import CatBot
from .transport import MatrixTransport

__all__ = ["CatBot", "MatrixTransport"]
