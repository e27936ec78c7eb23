"""Named post-processing functions selectable from a field descriptor.

Only functions registered here can be applied to extracted values; request
payloads select them by name and never carry executable code.
"""

import re
from typing import Any, Callable, Dict, Optional

_WHITESPACE = re.compile(r"\s+")
_NUMBER = re.compile(r"-?\d+(?:[.,]\d+)?")


def _strip(value: str) -> str:
    return value.strip()


def _collapse_whitespace(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = _NUMBER.search(str(value).replace(" ", ""))
    if not match:
        return None
    return float(match.group(0).replace(",", "."))


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


POSTPROCESSORS: Dict[str, Callable[[Any], Any]] = {
    "strip": _strip,
    "lower": lambda value: value.lower(),
    "upper": lambda value: value.upper(),
    "collapse_whitespace": _collapse_whitespace,
    "to_int": _to_int,
    "to_float": _to_float,
}


def is_known(name: str) -> bool:
    """Check whether a post-processor is registered under ``name``."""
    return name in POSTPROCESSORS


def apply_postprocessor(name: str, value: Any) -> Any:
    """Apply a named post-processor to an extracted value.

    Lists are processed element-wise and ``None`` passes through untouched,
    so empty results keep their shape. Booleans (``exists``) are returned
    as-is.
    """
    func = POSTPROCESSORS[name]

    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, list):
        return [None if item is None else func(item) for item in value]
    return func(value)
