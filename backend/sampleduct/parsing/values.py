from __future__ import annotations

import datetime
import math
import re
from decimal import Decimal

_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


class InvalidValueError(ValueError):
    pass


class InvalidTimeError(ValueError):
    pass


def format_number(value: float) -> str:
    formatted = format(Decimal(str(value)).normalize(), "f")
    return "0" if formatted == "-0" else formatted


def parse_number(raw: str | None) -> float:
    text = (raw or "").strip()
    if not text:
        raise InvalidValueError("empty value")
    if not _NUMBER_RE.fullmatch(text):
        raise InvalidValueError(f"not a number: {text!r}")
    number = float(text)
    if not math.isfinite(number):
        raise InvalidValueError(f"not a finite number: {text!r}")
    return number


def parse_utc_time(raw: str | None) -> datetime.datetime:
    text = (raw or "").strip()
    if not text:
        raise InvalidTimeError("empty timestamp")
    try:
        parsed = datetime.datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidTimeError(f"not an ISO-8601 time: {text!r}") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=datetime.UTC)
    return parsed.astimezone(datetime.UTC)


def utc_now_iso() -> str:
    return datetime.datetime.now(datetime.UTC).isoformat()


def default_value_message(name: str, value: float) -> str:
    return f"Default value provided for {name}: {format_number(value)}"
