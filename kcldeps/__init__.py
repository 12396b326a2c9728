"""Import graphs, dependency listing and archive helpers for KCL configuration repositories."""

__version__ = "0.1.0"