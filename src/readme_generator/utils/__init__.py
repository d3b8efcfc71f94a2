"""Utility functions."""

from __future__ import annotations

import re
from functools import lru_cache

import tiktoken
from loguru import logger


def truncate_text(text: str, max_length: int = 1000, suffix: str = "...") -> str:
    """Truncate text to maximum length with suffix."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix


@lru_cache(maxsize=1)
def _encoding() -> tiktoken.Encoding | None:
    try:
        return tiktoken.get_encoding("o200k_base")
    except Exception as e:
        # The BPE file is downloaded on first use and may be unreachable
        logger.warning(f"tiktoken encoding unavailable, estimating tokens: {e}")
        return None


def truncate_to_tokens(text: str, max_tokens: int, suffix: str = "\n\n[truncated]") -> str:
    """Cut text down to roughly ``max_tokens`` tokens."""
    # Short inputs skip the tokenizer
    if len(text) <= max_tokens:
        return text
    enc = _encoding()
    if enc is None:
        return truncate_text(text, max_tokens * 4, suffix)
    tokens = enc.encode(text)
    if len(tokens) <= max_tokens:
        return text
    return enc.decode(tokens[:max_tokens]) + suffix


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated identifier for a heading."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug or "section"
