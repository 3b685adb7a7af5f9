"""Transaction load generation and performance measurement harness."""

__version__ = "0.1.0"
