# hexattest/canonical.py
"""
String -> bytes32 canonicalization.

Everything here is pure: no wallet, no network. The result is always a
0x-prefixed string with exactly 64 hex digits.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hexattest.errors import (
    EmptyInputError,
    InputShapeError,
    InvalidHexFormatError,
    PayloadTooLongError,
)

BYTES32_HEX_LEN = 64
HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


class InputMode(str, Enum):
    URL = "url"
    HEX = "hex"


@dataclass(frozen=True)
class ProcessedUrl:
    extracted_parts: str
    combined_string: str
    hex_bytes32: str


@dataclass(frozen=True)
class CanonicalValue:
    hex_bytes32: str
    processed: Optional[ProcessedUrl] = None


def _pad_bytes32(hex_digits: str) -> str:
    if len(hex_digits) > BYTES32_HEX_LEN:
        raise PayloadTooLongError(
            f"Payload is {(len(hex_digits) + 1) // 2} bytes, bytes32 holds at most 32"
        )
    return "0x" + hex_digits.ljust(BYTES32_HEX_LEN, "0")


def process_url(raw: str) -> ProcessedUrl:
    """
    Take the last two non-empty path segments of `raw`, join them with a space
    and right-pad their UTF-8 hex encoding to bytes32.

    "https://farcaster.xyz/sandusky/0x78e0db62" -> "sandusky 0x78e0db62"
    -> 0x73616e6475736b792030783738653064623632000...
    """
    parts = [p for p in (raw or "").strip().split("/") if p]
    if len(parts) < 2:
        raise InputShapeError("URL must have at least 2 path segments")

    first, second = parts[-2:]
    combined = f"{first} {second}"
    hex_digits = combined.encode("utf-8").hex()
    return ProcessedUrl(
        extracted_parts=f"{first}, {second}",
        combined_string=combined,
        hex_bytes32=_pad_bytes32(hex_digits),
    )


def format_hex(raw: str | None) -> str:
    """Right-pad a hex token (0x optional) to bytes32. Digit case is kept."""
    if raw is None or not raw.strip():
        raise EmptyInputError("Hex input is empty")

    s = raw.strip()
    if s.startswith("0x"):
        s = s[2:]
    if not HEX_RE.match(s):
        raise InvalidHexFormatError(f"Invalid hex format: {raw!r}")
    return _pad_bytes32(s)


def canonicalize(raw: str, mode: InputMode) -> CanonicalValue:
    """Canonicalize in the given mode; URL mode also keeps the processing steps."""
    if InputMode(mode) is InputMode.URL:
        processed = process_url(raw)
        return CanonicalValue(hex_bytes32=processed.hex_bytes32, processed=processed)
    return CanonicalValue(hex_bytes32=format_hex(raw))
