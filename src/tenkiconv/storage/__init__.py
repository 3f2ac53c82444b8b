"""Binary section record storage."""

from __future__ import annotations

from .section_store import SectionStore, decode_records, encode_records

__all__ = ["SectionStore", "decode_records", "encode_records"]
