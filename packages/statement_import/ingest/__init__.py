"""File-level ingestion helpers (the engine's only I/O boundary)."""

from .loader import load_statement_text

__all__ = ["load_statement_text"]
