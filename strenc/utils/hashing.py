# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hashing utilities for StrEnc.

Persisted encoder records carry a SHA256 over their canonical JSON form, so
a hand-edited or corrupted dictionary is caught on load instead of silently
shifting token ids.
"""

import hashlib
import json
from typing import Any


def compute_sha256_bytes(data: bytes) -> str:
    """Lowercase hex SHA256 digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def canonical_json(payload: Any) -> bytes:
    """
    Serialize to JSON with sorted keys and no insignificant whitespace.

    Two structurally equal payloads always produce the same bytes, which is
    what makes the digest below stable across json, yaml and torch files.
    """
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def compute_payload_sha256(payload: Any) -> str:
    """SHA256 of a JSON-compatible payload's canonical form."""
    return compute_sha256_bytes(canonical_json(payload))
