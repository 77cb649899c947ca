import re
from typing import Any

NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_number(value: Any) -> float:
    """
    First decimal number found in a free-text field, "." or "," as separator.
    "2 pages" -> 2.0, "1,5 ruku" -> 1.5, "none" -> 0.0
    """
    text = to_text(value).strip()
    if not text:
        return 0.0
    match = NUMBER_RE.search(text.replace(",", ".", 1))
    return float(match.group(1)) if match else 0.0
