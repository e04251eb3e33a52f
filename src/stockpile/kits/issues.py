"""Validation outcome types shared by kit and category validators."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found while validating a kit file."""

    path: str
    message: str
    code: str


@dataclass
class ValidationResult:
    """Errors block import; warnings are reported but never block."""

    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def error(self, path: str, message: str, code: str) -> None:
        self.errors.append(ValidationIssue(path, message, code))

    def warn(self, path: str, message: str, code: str) -> None:
        self.warnings.append(ValidationIssue(path, message, code))

    def extend(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def warned_paths(self) -> set[str]:
        return {issue.path for issue in self.warnings}

    def summary(self) -> str:
        return "; ".join(f"{issue.path}: {issue.message}" for issue in self.errors)


def is_number(value: object) -> bool:
    """True for finite ints/floats (booleans excluded).

    Ints count only when they fit in a float, since kit models store floats.
    """

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def is_non_empty_string(value: object) -> bool:
    return isinstance(value, str) and value.strip() != ""
