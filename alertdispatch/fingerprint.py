"""Stable label-set fingerprints.

A fingerprint is a 64-bit FNV-1a hash over the label pairs sorted by name,
with every name and value terminated by a separator byte that cannot occur
in UTF-8 text. The result only depends on the label set, never on insertion
order, annotations or status.
"""

from typing import Mapping

FNV_OFFSET_64 = 14695981039346656037
FNV_PRIME_64 = 1099511628211
SEPARATOR_BYTE = 0xFF

_MASK_64 = 0xFFFFFFFFFFFFFFFF


def _hash_add(h: int, data: bytes) -> int:
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME_64) & _MASK_64
    return h


def _hash_add_byte(h: int, byte: int) -> int:
    h ^= byte
    return (h * FNV_PRIME_64) & _MASK_64


def fingerprint(labels: Mapping[str, str]) -> int:
    """Compute the 64-bit fingerprint of a label set."""
    h = FNV_OFFSET_64
    for name in sorted(labels):
        h = _hash_add(h, name.encode("utf-8"))
        h = _hash_add_byte(h, SEPARATOR_BYTE)
        h = _hash_add(h, str(labels[name]).encode("utf-8"))
        h = _hash_add_byte(h, SEPARATOR_BYTE)
    return h


def fingerprint_hex(labels: Mapping[str, str]) -> str:
    """Fingerprint formatted as 16 lowercase hex digits."""
    return f"{fingerprint(labels):016x}"
