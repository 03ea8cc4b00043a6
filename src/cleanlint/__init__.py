"""Rule-based clean-code checker for JavaScript."""

__all__ = ["__version__"]

__version__ = "0.1.0"
