"""kitescope - scope-aware editor tooling for the Kite language."""

__version__ = "0.1.0"
