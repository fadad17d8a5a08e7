"""Locale-free helpers for humanizing numbers, sizes, durations and filenames."""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

FilenameNormalizer = Callable[[str], str]
FilenameHumanizer = Callable[[str], Optional[str]]

_BINARY_UNITS = ("KiB", "MiB", "GiB", "TiB", "PiB")
_DECIMAL_UNITS = ("kB", "MB", "GB", "TB", "PB")

# (suffix, milliseconds), largest first
_DURATION_UNITS = (
    ("d", 86_400_000),
    ("h", 3_600_000),
    ("m", 60_000),
    ("s", 1_000),
    ("ms", 1),
)


def humanize_number(value: float, separator: str = ",") -> str:
    """Format *value* with a thousands separator: ``1234567`` -> ``1,234,567``."""
    if value != value:  # NaN
        return "NaN"
    sign = "-" if value < 0 else ""
    value = abs(value)
    if value == float("inf"):
        return sign + "inf"

    if float(value).is_integer():
        integer, fraction = str(int(value)), ""
    else:
        # shortest round-trip digits, never in exponent form
        integer, _, fraction = format(Decimal(repr(float(value))), "f").partition(".")

    groups: list[str] = []
    while len(integer) > 3:
        groups.insert(0, integer[-3:])
        integer = integer[:-3]
    groups.insert(0, integer)

    result = sign + separator.join(groups)
    if fraction:
        result += "." + fraction
    return result


def humanize_filesize(size: float, binary: bool = True) -> str:
    """Format a byte count: ``512`` -> ``512 B``, ``1048576`` -> ``1.0 MiB``.

    Binary steps of 1024 are used by default; *binary=False* switches to SI
    steps of 1000.  Anything above a byte is shown with one decimal.
    """
    step = 1024 if binary else 1000
    units = _BINARY_UNITS if binary else _DECIMAL_UNITS

    if abs(size) < step:
        return f"{int(size)} B"

    value = float(size)
    unit = units[0]
    for unit in units:
        value /= step
        if abs(value) < step:
            break
    return f"{value:.1f} {unit}"


def humanize_duration(milliseconds: float) -> str:
    """Format a duration using its two largest non-zero units.

    >>> humanize_duration(90_061_000)
    '1d 1h'
    >>> humanize_duration(1500)
    '1s 500ms'
    """
    remaining = int(round(abs(milliseconds)))
    sign = "-" if milliseconds < 0 and remaining else ""

    parts: list[str] = []
    for suffix, size in _DURATION_UNITS:
        amount, remaining = divmod(remaining, size)
        if amount:
            parts.append(f"{amount}{suffix}")
            if len(parts) == 2:
                break

    if not parts:
        return "0ms"
    return sign + " ".join(parts)


def grammar_number(count: float, singular: str, plural: str, none: str | None = None) -> str:
    """Pick the word form matching *count*."""
    if count == 0 and none is not None:
        return none
    if count == 1:
        return singular
    return plural


def identity_normalizer(filename: str) -> str:
    return filename


def no_humanization(filename: str) -> str | None:
    return None


def format_filename(
    filename: str,
    normalize: FilenameNormalizer = identity_normalizer,
    humanize: FilenameHumanizer = no_humanization,
) -> tuple[str, str]:
    """Return ``(label, target)`` for *filename*.

    The target is always the normalized form; the label is the humanized form
    when the humanizer offers one, the normalized form otherwise.
    """
    target = normalize(filename)
    label = humanize(target)
    return (label if label is not None else target, target)
