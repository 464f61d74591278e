# src/pkg_jwt/domain/value_objects.py

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping, Tuple

from .exceptions import InvalidClaimSpecError, InvalidKeyError


# --- Claim specs --------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClaimSpec:
    """
    One configured claim contributor: a registry tag plus the literal
    parameters passed to its factory.

    Accepted configuration forms:

        "app_name_as_issuer"
        ["not_within", "1 hour"]
        {"claim": "as_audience", "params": [["users", "admin"]]}
    """
    tag: str
    params: Tuple[Any, ...] = ()

    @classmethod
    def from_config(cls, entry: Any) -> ClaimSpec:
        if isinstance(entry, ClaimSpec):
            return entry

        if isinstance(entry, str):
            tag, params = entry, ()
        elif isinstance(entry, (list, tuple)) and entry:
            tag, params = entry[0], tuple(entry[1:])
        elif isinstance(entry, Mapping) and "claim" in entry:
            tag = entry["claim"]
            raw = entry.get("params") or ()
            if not isinstance(raw, (list, tuple)):
                raise InvalidClaimSpecError(f"Claim params must be a list, got {raw!r}")
            params = tuple(raw)
        else:
            raise InvalidClaimSpecError(f"Invalid claim configuration: {entry!r}")

        if not isinstance(tag, str) or not tag.strip():
            raise InvalidClaimSpecError(f"Invalid claim tag: {tag!r}")

        return cls(tag=tag.strip(), params=params)


# --- Key material ---------------------------------------------------------------


BASE64_PREFIX = "base64:"
FILE_PREFIX = "file:"


def load_key(source: str) -> bytes:
    """
    Turn a configured key string into raw key bytes.

      base64:<data>  -> decoded bytes
      file:<path>    -> contents of the file
      anything else  -> UTF-8 bytes of the string itself
    """
    if not isinstance(source, str) or not source:
        raise InvalidKeyError("Key must be a non-empty string")

    if source.startswith(BASE64_PREFIX):
        try:
            data = base64.b64decode(source[len(BASE64_PREFIX):], validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidKeyError("Key is not valid base64") from exc
    elif source.startswith(FILE_PREFIX):
        path = Path(source[len(FILE_PREFIX):]).expanduser()
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise InvalidKeyError(f"Cannot read key file: {path}") from exc
    else:
        data = source.encode("utf-8")

    if not data:
        raise InvalidKeyError("Key resolved to an empty value")
    return data


@dataclass(frozen=True, slots=True)
class KeyMaterial:
    """
    Prepared keys for one generator. Symmetric algorithms use the same
    secret for both sides.
    """
    signing_key: Any
    verification_key: Any

    @classmethod
    def symmetric(cls, key: Any) -> KeyMaterial:
        return cls(signing_key=key, verification_key=key)

    def __repr__(self) -> str:
        return "KeyMaterial(<redacted>)"


# --- Durations ------------------------------------------------------------------


_ISO_DURATION = re.compile(
    r"^P(?!$)(?:(?P<weeks>\d+)W)?(?:(?P<days>\d+)D)?"
    r"(?:T(?=\d)(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)
_RELATIVE_DURATION = re.compile(r"^\+?\s*(?:\d+\s*[a-z]+\s*)+$")
_RELATIVE_PART = re.compile(r"(\d+)\s*([a-z]+)")

_UNITS = {
    "s": "seconds", "sec": "seconds", "secs": "seconds", "second": "seconds", "seconds": "seconds",
    "m": "minutes", "min": "minutes", "mins": "minutes", "minute": "minutes", "minutes": "minutes",
    "h": "hours", "hour": "hours", "hours": "hours",
    "d": "days", "day": "days", "days": "days",
    "w": "weeks", "week": "weeks", "weeks": "weeks",
}


def _timedelta(**parts: int) -> timedelta:
    try:
        return timedelta(**parts)
    except OverflowError as exc:
        raise ValueError(f"Duration out of range: {parts!r}") from exc


def parse_duration(value: Any) -> timedelta:
    """
    Parse an interval given as seconds (int or digit string), an ISO-8601
    duration ("PT1H", "P1DT12H") or a relative expression ("1 hour",
    "2 days 4 hours", "+30 minutes").

    Raises ValueError for anything else.
    """
    if isinstance(value, timedelta):
        if value < timedelta(0):
            raise ValueError("Duration must not be negative")
        return value

    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")

    if isinstance(value, int):
        if value < 0:
            raise ValueError("Duration must not be negative")
        return _timedelta(seconds=value)

    if not isinstance(value, str):
        raise ValueError(f"Invalid duration: {value!r}")

    text = value.strip()
    if text.isdigit():
        return _timedelta(seconds=int(text))

    iso = _ISO_DURATION.match(text.upper())
    if iso:
        parts = {k: int(v) for k, v in iso.groupdict().items() if v is not None}
        return _timedelta(**parts)

    lowered = text.lower()
    if _RELATIVE_DURATION.match(lowered):
        parts: dict[str, int] = {}
        for amount, unit in _RELATIVE_PART.findall(lowered):
            field = _UNITS.get(unit)
            if field is None:
                raise ValueError(f"Unsupported duration unit: {unit!r}")
            parts[field] = parts.get(field, 0) + int(amount)
        return _timedelta(**parts)

    raise ValueError(f"Invalid duration: {value!r}")
