"""Resource model, change predicates and watch helpers for an application connector operator."""

__version__ = "0.1.0"
__all__ = ["api", "gvk", "checksum", "predicates", "watch"]