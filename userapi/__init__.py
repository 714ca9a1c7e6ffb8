"""userapi — layered HTTP service for creating and reading users."""

__version__ = "1.0.0"
