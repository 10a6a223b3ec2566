"""
Dynamic value helpers for the OSL runtime.

OSL values are plain Python objects: ``int``/``float`` numbers, ``str``,
``bool``, ``None`` (unset), ``list`` and ``dict`` (nested state). Scripts
were written against a loosely typed host, so these helpers reproduce its
coercions: text rendering, truthiness, and arithmetic that never raises.
"""

import math
import re
from typing import Any, Dict, List, Union

from ..tokens import number_value

Scalar = Union[int, float, str, bool, None]
Value = Union[Scalar, List["Value"], Dict[str, "Value"]]

MAX_SAFE_INTEGER = 2 ** 53 - 1

NUMERIC_RE = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')
INFINITY_RE = re.compile(r'^([+-]?)Infinity$')


def is_number(v: Any) -> bool:
    """True for int/float, excluding bool."""
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def to_display(v: Any) -> str:
    """Render a value as text the way scripts expect to see it."""
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, int):
        return str(v)
    if isinstance(v, float):
        if math.isnan(v):
            return "NaN"
        if math.isinf(v):
            return "Infinity" if v > 0 else "-Infinity"
        if v.is_integer() and abs(v) < 1e21:
            return str(int(v))
        return repr(v)
    if isinstance(v, str):
        return v
    if isinstance(v, (list, tuple)):
        return ",".join("" if x is None else to_display(x) for x in v)
    if isinstance(v, dict):
        return "[object Object]"
    return str(v)


def is_truthy(v: Any) -> bool:
    """Truthiness: 0, NaN, empty text, None and False are falsy; containers are truthy."""
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    if is_number(v):
        return v != 0 and not math.isnan(v)
    if isinstance(v, str):
        return len(v) > 0
    return True


def to_number(v: Any) -> Union[int, float]:
    """Coerce to a number; anything without a numeric reading becomes 0."""
    if v is None:
        return 0
    if isinstance(v, bool):
        return int(v)
    if is_number(v):
        return _clamp(v)
    if isinstance(v, str):
        text = v.strip()
        match = INFINITY_RE.match(text)
        if match:
            return -math.inf if match.group(1) == '-' else math.inf
        if NUMERIC_RE.match(text):
            return number_value(text)
        return 0
    return 0


def _clamp(v: Union[int, float]) -> Union[int, float]:
    """Integers past the exact float range become floats, inf once too large."""
    if isinstance(v, int) and abs(v) > MAX_SAFE_INTEGER:
        try:
            return float(v)
        except OverflowError:
            return math.copysign(math.inf, v)
    return v


def or_zero(v: Any) -> Any:
    """``v || 0``"""
    return v if is_truthy(v) else 0


def add(a: Any, b: Any) -> Any:
    """``+``: falsy operands become 0; concatenates when either side is not numeric."""
    a = or_zero(a)
    b = or_zero(b)
    if isinstance(a, (str, list, tuple, dict)) or isinstance(b, (str, list, tuple, dict)):
        return to_display(a) + to_display(b)
    return _clamp(to_number(a) + to_number(b))


def divide(a: Union[int, float], b: Union[int, float]) -> float:
    """Float division with IEEE results for a zero divisor."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a)
    return a / b


def arithmetic(op: str, a: Any, b: Any) -> Any:
    """Apply a binary operator from the ``+ - * /`` set."""
    if op == '+':
        return add(a, b)
    x = to_number(or_zero(a))
    y = to_number(or_zero(b))
    if op == '-':
        return _clamp(x - y)
    elif op == '*':
        return _clamp(x * y)
    elif op == '/':
        return divide(x, y)
    raise ValueError(f"unknown operator {op!r}")
