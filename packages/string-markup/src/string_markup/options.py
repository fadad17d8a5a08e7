"""Per-render configuration."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from string_markup.humanize import (
    FilenameHumanizer,
    FilenameNormalizer,
    identity_normalizer,
    no_humanization,
)
from string_markup.parser import DEFAULT_MAX_DEPTH, clamp_depth

DEFAULT_COLUMNS = 80


class GridOutputFormat(str, Enum):
    ANSI = "ansi"
    HTML = "html"
    NONE = "none"


def terminal_columns() -> int:
    """Width of the host terminal, or 80 when stdout is not a terminal."""
    try:
        return os.get_terminal_size(sys.stdout.fileno()).columns or DEFAULT_COLUMNS
    except (ValueError, OSError, AttributeError):
        return DEFAULT_COLUMNS


@dataclass
class MarkupFormatOptions:
    """Options for a single render call. Treated as read-only while rendering."""

    format: Union[GridOutputFormat, str] = GridOutputFormat.NONE
    columns: int = field(default_factory=terminal_columns)
    normalize_filename: FilenameNormalizer = identity_normalizer
    humanize_filename: FilenameHumanizer = no_humanization
    strip_positions: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        self.format = GridOutputFormat(self.format)
        if self.columns <= 0:
            raise ValueError(f"columns must be positive, got {self.columns}")
        if self.max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        self.max_depth = clamp_depth(self.max_depth)
