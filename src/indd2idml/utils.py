from __future__ import annotations

import hashlib
import os
import re
import tempfile
import time
from pathlib import Path

from .constraint import SOURCE_SUFFIX


def generate_run_id(prefix: str = "run") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding=encoding) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


_SOURCE_SUFFIX_RE = re.compile(re.escape(SOURCE_SUFFIX) + "$", re.IGNORECASE)


def replace_source_suffix(name: str, replacement: str) -> str:
    """Swap a trailing ``.indd`` for ``replacement``; append when absent."""

    if _SOURCE_SUFFIX_RE.search(name):
        return _SOURCE_SUFFIX_RE.sub(replacement, name)
    return name + replacement
