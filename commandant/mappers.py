"""
Commandant value mappers (string → typed value converters).

Scope
- A mapper is any callable taking the raw string of one argument value and
  returning the typed value, raising on malformed input. Parsers capture the
  raised exception and report it as a ValueMappingError; mappers never need to
  know about faults.
- The callables in this module cover the common scalar, date and filesystem
  types. Factories (choice, enumeration) build named mappers on demand.

Naming
- Mappers are plain functions; their __name__ is shown in fault hints
  ("expected a value accepted by 'integer'"), so generated mappers are renamed
  with rename().
"""
import datetime as _datetime
import decimal as _decimal
import enum
import pathlib

from .utils import rename


def noop(raw, /):
    """Identity mapper: hand back the raw string untouched."""
    return raw


def integer(raw, /):
    """Map a base-10 integer literal (underscores allowed, as in Python)."""
    return int(raw, 10)


def floating(raw, /):
    return float(raw)


def decimal(raw, /):
    """
    Map an exact decimal literal.

    decimal.InvalidOperation is an ArithmeticError, so it is re-raised as a
    ValueError to keep mapper failures uniform.
    """
    try:
        return _decimal.Decimal(raw.strip())
    except _decimal.InvalidOperation:
        raise ValueError(f"invalid decimal literal: {raw!r}") from None


_TRUTHS = frozenset({"true", "yes", "on", "1"})
_FALSES = frozenset({"false", "no", "off", "0"})


def boolean(raw, /):
    """
    Map a boolean literal (case-insensitive).

    - true/yes/on/1   → True
    - false/no/off/0  → False
    - anything else   → ValueError
    """
    if (lowered := raw.strip().lower()) in _TRUTHS:
        return True
    if lowered in _FALSES:
        return False
    raise ValueError(f"invalid boolean literal: {raw!r}")


def date(raw, /):
    """Map an ISO 8601 calendar date (YYYY-MM-DD)."""
    return _datetime.date.fromisoformat(raw)


def datetime(raw, /):
    """Map an ISO 8601 date-time (YYYY-MM-DDTHH:MM[:SS[.ffffff]][+HH:MM])."""
    return _datetime.datetime.fromisoformat(raw)


def path(raw, /):
    return pathlib.Path(raw)


def choice(*values, mapper=noop):
    """
    Build a mapper accepting only the given values.

    The raw string is first converted with 'mapper', then checked for
    membership. The returned callable is named "choice" and exposes the
    allowed values as its 'choices' attribute (used in fault hints).
    """
    if not values:
        raise TypeError("choice() must receive at least one value")
    if not callable(mapper):
        raise TypeError("choice() 'mapper' must be callable")

    @rename("choice")
    def mapping(raw, /):
        if (value := mapper(raw)) not in values:
            raise ValueError(f"{raw!r} is not one of {', '.join(map(repr, values))}")
        return value

    mapping.choices = values
    return mapping


def enumeration(kind, /):
    """
    Build a mapper resolving an Enum member by name (case-insensitive),
    falling back to a lookup by value.
    """
    if not isinstance(kind, type) or not issubclass(kind, enum.Enum):
        raise TypeError("enumeration() argument must be an enum type")

    members = {name.lower(): member for name, member in kind.__members__.items()}

    @rename(kind.__name__.lower())
    def mapping(raw, /):
        try:
            return members[raw.strip().lower()]
        except KeyError:
            pass
        try:
            return kind(raw)
        except ValueError:
            raise ValueError(f"{raw!r} is not one of {', '.join(members)}") from None

    mapping.choices = tuple(members)
    return mapping


__all__ = (
    "noop",
    "integer",
    "floating",
    "decimal",
    "boolean",
    "date",
    "datetime",
    "path",
    "choice",
    "enumeration",
)
