from __future__ import annotations

import re
from typing import List


_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_WHITESPACE_RE = re.compile(r"\s+")


def tokenize(text: str) -> List[str]:
    return _NON_ALNUM_RE.sub(" ", (text or "").lower()).split()


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def safe_name(name: str) -> str:
    """Make a project name usable as a directory name."""
    return re.sub(r"[^\w.-]", "_", name)


def redact(secret: str, keep: int = 4) -> str:
    if not secret:
        return ""
    if len(secret) <= keep:
        return "****"
    return "*" * (len(secret) - keep) + secret[-keep:]
