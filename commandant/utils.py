"""
Commandant utilities shared by the parser, fault and command layers.

- Unset: "not given" marker for keyword defaults, since None is a valid parser
  default and flag value.
- coalesce(): swap Unset for a fallback.
- rename(): decorator fixing the name of generated callables, so mappers
  built by choice()/enumeration() show up by name in fault hints and metavars.
- mirror(): read-only property over "_<name>" used for every introspectable
  field of parsers and commands; containers are handed out as copies.
- ordinal(): "first", "second", ..., "11th"; positions in fault messages.

    >>> coalesce(Unset, "VALUE")
    'VALUE'
    >>> ordinal(3)
    'third'
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker (one instance per process, falsy, sealed).

    It joins PEP 604 unions so that isinstance(descr, str | Unset) reads
    naturally in the metadata sanitizers.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object, or default when object is Unset.

    Only Unset is replaced: None, 0 and "" are legitimate parser defaults.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator giving the decorated callable a fixed __name__ and __qualname__.

        @rename("choice")
        def mapper(raw): ...
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def wrapper(callable):
        if not builtins.callable(callable):
            raise TypeError("@rename() must be applied to a callable")
        try:
            callable.__name__ = callable.__qualname__ = name
        except (AttributeError, TypeError):
            raise TypeError("@rename() must be applied to a callable with a writable name") from None
        return callable

    wrapper.__name__ = wrapper.__qualname__ = "rename"
    return wrapper


def _copy(object):
    # tuples stay tuples (parsers, choices); other containers become mutable copies
    match object:
        case str():
            return object
        case tuple():
            return tuple(_copy(item) for item in object)
        case Mapping():
            return {key: _copy(value) for key, value in object.items()}
        case Set():
            return set(object)
        case Sequence():
            return [_copy(item) for item in object]
    return object


def mirror(name, /):
    """
    Read-only property returning a copy of self._<name>.

    Used through __introspectable__: Option.names gives a fresh set each time,
    so callers cannot alter the frozenset a parser matches against.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _copy(getattr(self, "_" + name))

    return property(getter)


_WORDS = (
    "first", "second", "third", "fourth", "fifth",
    "sixth", "seventh", "eighth", "ninth", "tenth",
)


@functools.cache
def ordinal(number, /):
    """Ordinal label of a 1-based input position ("first" ... "tenth", then "11th", "22nd", ...)."""
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if 10 < number % 100 < 20:
        return f"{number}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "UnsetType",
    "Unset",
)
