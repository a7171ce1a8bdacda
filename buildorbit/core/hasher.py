"""Canonical hashing helpers for node colors and tree fingerprints.

Colors are content-addressed: the same identity hashes to the same hue in
every run, so the tree view and the build overlay always agree.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from buildorbit.models.tree import Color


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def name_color(name: str) -> Color:
    """RGB color from the first three bytes of the MD5 digest of *name*."""
    digest = hashlib.md5(name.encode("utf-8")).digest()
    return digest[0], digest[1], digest[2]

