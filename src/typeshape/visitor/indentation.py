"""Indentation calculation for the structure tree."""

from dataclasses import dataclass

from typeshape.exceptions import ContractViolationError


def indent(unit: str, repeat: int, depth: int) -> str:
    """``unit`` repeated ``repeat * depth`` times."""
    return unit * (repeat * depth)


@dataclass(frozen=True)
class IndentationOption:
    """Indentation unit and how many units make up one depth level."""

    unit: str = " "
    repeat: int = 4

    def __post_init__(self):
        if not isinstance(self.unit, str) or not self.unit:
            raise ContractViolationError("indentation unit must be a non-empty string")
        if "\n" in self.unit or "\r" in self.unit:
            raise ContractViolationError("indentation unit must not contain line breaks")
        if isinstance(self.repeat, bool) or not isinstance(self.repeat, int) or self.repeat < 0:
            raise ContractViolationError(f"indentation repeat must be a non-negative integer, got {self.repeat!r}")

    def indent(self, depth: int) -> str:
        return indent(self.unit, self.repeat, depth)


DEFAULT_INDENTATION = IndentationOption()
