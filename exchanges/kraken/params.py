"""
Request parameter encoding.

Kraken accepts the same ``key=value&key=value`` form for query strings (GET)
and for form bodies (POST). Values are joined as-is, without percent
escaping, because the body string is signed byte-for-byte exactly as sent.
"""

from typing import Any, Dict, Mapping, Optional


def format_value(value: Any) -> str:
    """Render a parameter value the way Kraken expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(format_value(v) for v in value)
    return str(value)


def encode_params(params: Optional[Mapping[str, Any]]) -> str:
    """
    Encode a mapping as ``k1=v1&k2=v2`` in insertion order.

    Example:
        >>> encode_params({"pair": "XBTUSD", "count": 10})
        'pair=XBTUSD&count=10'
    """
    if not params:
        return ""
    return "&".join(f"{key}={format_value(value)}" for key, value in params.items())


def parse_params(text: str) -> Dict[str, str]:
    """
    Parse a ``k1=v1&k2=v2`` string back into a dict.

    Example:
        >>> parse_params("pair=XBTUSD&count=10")
        {'pair': 'XBTUSD', 'count': '10'}
    """
    params: Dict[str, str] = {}
    if not text:
        return params
    for pair in text.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params[key] = value
    return params


def build_params(**values: Any) -> Dict[str, Any]:
    """
    Build a parameter dict, dropping arguments that were not given (None).

    Example:
        >>> build_params(pair="XBTUSD", since=None, count=10)
        {'pair': 'XBTUSD', 'count': 10}
    """
    return {key: value for key, value in values.items() if value is not None}
