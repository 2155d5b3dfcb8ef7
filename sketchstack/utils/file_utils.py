"""File utilities."""
from __future__ import annotations

from pathlib import Path


def ensure_dir(path: str) -> Path:
    """Ensure directory exists and return Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_text_file(path: str) -> str:
    """Read a description or plan file as UTF-8.

    Raises FileNotFoundError for a missing path and ValueError for content that is
    not text (NUL bytes, undecodable UTF-8).
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Missing file: {path}")
    data = p.read_bytes()
    if b"\x00" in data[:512]:
        raise ValueError(f"Binary file: {p.name}")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        raise ValueError(f"Unable to read text file: {p.name}") from None
