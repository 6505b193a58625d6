"""Rough token-savings estimate of TOON text against compact JSON."""

from __future__ import annotations

import json
import math
from typing import Any

from tooncodec.model.values import Value

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_savings(toon_text: str, equivalent_value: Any) -> int:
    """Percentage of tokens saved by ``toon_text`` over the JSON encoding.

    Tokens are approximated as four characters each. The result is floored
    and never negative; it is telemetry, not a guarantee.
    """

    data = equivalent_value.to_python() if isinstance(equivalent_value, Value) else equivalent_value
    json_text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    json_tokens = estimate_tokens(json_text)
    if json_tokens == 0:
        return 0
    savings = math.floor((1 - estimate_tokens(toon_text) / json_tokens) * 100)
    return max(0, savings)


__all__ = ["CHARS_PER_TOKEN", "estimate_savings", "estimate_tokens"]
