import math
from typing import Any


def normalize_key(raw: Any) -> str:
    """Render a raw JSON key as its canonical string form.

    Keys arrive either as path parameters (already strings) or inside a JSON
    body, where clients may send numbers or booleans. Rendering them to one
    canonical string makes ``42`` and ``"42"`` address the same record.

    Args:
        raw: Key value decoded from JSON or taken from the URL path.

    Returns:
        str: Canonical key string (may be empty; callers decide if that is valid).

    Raises:
        TypeError: If the key is null, an object, an array or a non-finite float.

    Examples:
        >>> normalize_key("abc")
        'abc'
        >>> normalize_key(42)
        '42'
        >>> normalize_key(1.0)
        '1'
        >>> normalize_key(True)
        'true'
    """
    if isinstance(raw, str):
        return raw
    # bool before int: bool is an int subclass
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, float):
        if not math.isfinite(raw):
            raise TypeError("non-finite numbers cannot be used as keys")
        if raw.is_integer():
            return str(int(raw))
        return repr(raw)
    raise TypeError(f"unsupported key type: {type(raw).__name__}")
