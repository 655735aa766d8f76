"""Generate bpftrace scripts from YAML trace descriptions and adapt automatic triggers."""

__version__ = "0.1.0"
__all__ = ["__version__"]