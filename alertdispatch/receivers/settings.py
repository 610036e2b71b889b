"""Decode-and-coerce helpers for loosely typed receiver settings.

Settings arrive as JSON written by humans and UIs: numbers may be strings
or floats, optional strings may be empty or null. These helpers turn that
into typed values and raise a named error for the field that is wrong.
"""

import json
from typing import Any, Dict, Mapping, Optional, Union

from .errors import FieldNotNumericError, SettingsDecodeError


RawSettings = Union[str, bytes, Mapping[str, Any], None]


def decode_settings(raw: RawSettings) -> Dict[str, Any]:
    """Decode a raw settings document into a dictionary.

    Raises:
        SettingsDecodeError: If the document is empty, not JSON or not an object
    """
    if isinstance(raw, Mapping):
        return dict(raw)
    if raw is None:
        raise SettingsDecodeError("settings are empty")
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not raw.strip():
        raise SettingsDecodeError("settings are empty")

    try:
        decoded = json.loads(raw)
    except ValueError as e:
        raise SettingsDecodeError(str(e)) from e

    if not isinstance(decoded, dict):
        raise SettingsDecodeError("settings must be a JSON object")
    return decoded


def get_str(settings: Mapping[str, Any], key: str, default: str = "") -> str:
    """Read an optional string setting; null and empty fall back to default."""
    value = settings.get(key)
    if value is None:
        return default
    value = str(value)
    return value if value != "" else default


def coerce_int(value: Any, field: str, message: Optional[str] = None) -> Optional[int]:
    """Coerce a numeric setting to an integer.

    Accepts integers, integral floats and strings holding an integer.
    Null and the empty string mean "not set" and yield None.

    Raises:
        FieldNotNumericError: If the value is not an integer
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise FieldNotNumericError(field, value, message)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise FieldNotNumericError(field, value, message)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise FieldNotNumericError(field, value, message) from None
    raise FieldNotNumericError(field, value, message)


def get_int(settings: Mapping[str, Any], key: str, default: int = 0, message: Optional[str] = None) -> int:
    """Read an integer setting, raising FieldNotNumericError when malformed."""
    value = coerce_int(settings.get(key), key, message)
    return default if value is None else value


def get_int_or_default(settings: Mapping[str, Any], key: str, default: int = 0) -> int:
    """Read an integer setting, falling back to default when malformed."""
    try:
        return get_int(settings, key, default)
    except FieldNotNumericError:
        return default
