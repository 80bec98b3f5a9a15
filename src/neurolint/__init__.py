"""NeuroLint - batch code fixes through the NeuroLint transform service."""

__version__ = "1.0.0"

__all__ = ["__version__"]
