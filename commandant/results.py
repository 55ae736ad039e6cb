"""
Commandant parsing result (per-execution aggregator).

A ParsingResult is created fresh for every parse pass and collects, side by
side, what each parser produced:
- values: one slot per parser, aligned to the command's parser order;
- missing: parsers that found nothing and are required;
- unknown: input units no parser claimed;
- errors: per-parser faults (grouping, missing value, mapping).

Nothing is raised here; the command turns an invalid result into a single
ParsingFailure once every parser has run.
"""
from .utils import Unset


class ParsingResult:
    """
    Outcome of matching one command's parsers against one input.

    Parameters
    - size: int
      Number of parsers of the command (one value slot each).
    """

    def __init__(self, size, /):
        self._values = [Unset] * size
        self._missing = []
        self._unknown = []
        self._errors = []

    @property
    def values(self):
        """Ordered values; Unset marks a slot that produced no value."""
        return tuple(self._values)

    @property
    def missing(self):
        return tuple(self._missing)

    @property
    def unknown(self):
        return tuple(self._unknown)

    @property
    def errors(self):
        return tuple(self._errors)

    @property
    def valid(self):
        return not (self._missing or self._unknown or self._errors)

    def record(self, index, value, /):
        self._values[index] = value

    def miss(self, parser, /):
        self._missing.append(parser)

    def reject(self, argument, /):
        self._unknown.append(argument)

    def fail(self, error, /):
        self._errors.append(error)

    def __repr__(self):
        return (
            f"parsing-result(values={self.values!r}, missing={self.missing!r}, "
            f"unknown={self.unknown!r}, errors={self.errors!r})"
        )

    def __rich_repr__(self):
        yield "values", self.values
        yield "missing", self.missing
        yield "unknown", self.unknown
        yield "errors", self.errors


__all__ = (
    "ParsingResult",
)
