"""A small shell engine: $? expansion, builtins, redirections and pipelines for parsed commands."""

__version__ = "0.1.0"