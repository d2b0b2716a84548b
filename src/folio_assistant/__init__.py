"""Answer synthesis, symbol resolution and preference memory for a portfolio assistant."""

__version__ = "0.1.0"
