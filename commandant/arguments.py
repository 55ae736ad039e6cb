r"""
Commandant argument parsers.

Overview
- Parsers (one per instruction parameter, in order)
  • Flag: named, presence-only option (e.g. -v/--verbose); yields its flag
    value when given, its default otherwise. Never reported missing.
  • Option[_T]: named, value-taking option (e.g. -o/--output PATH).
  • Operand[_T]: positional value at a fixed operand position.
  • ArrayOperand[_T]: every operand left after the fixed ones, as a tuple.

- Necessity (Option, Operand, ArrayOperand), applied when nothing matched
  • OPTIONAL: use the default (as-is, never mapped).
  • REQUIRED: report the parser missing.
  • PROMPT: read a line from the prompter and map it.
  • MASKED_PROMPT: same, without echo.

- Matching
  Each parser exposes parse(index, arguments, result, prompter): it claims
  the units it owns from the shared 'arguments' list (claimed units are
  removed) and records its outcome in 'result' at 'index'. Faults are
  recorded, never raised, so every problem of one input is reported at once.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
    selected fields via read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- Shared: mapper (callable), descr (Unset | str | Text, non-empty).
- Named (Flag/Option): names validated as shell-style identifiers; duplicates rejected.
- Valued (Option/Operand/ArrayOperand): metavar, necessity, default, prompt.

Quick example:
    >>> from commandant.arguments import Flag, Option, Operand
    >>> from commandant.mappers import integer
    >>> Option("-t", "--threads", mapper=integer, default=1)
    option(names={'-t', '--threads'}, metavar='INTEGER', ...)
"""
import enum
import functools
import operator
import re

from rich.text import Text

from .faults import GroupingError, MissingValueError, ValueMappingError, FaultCode
from .inputs import Kind
from .mappers import noop
from .utils import *


class Necessity(enum.Enum):
    """
    policy applied by a value-taking parser when the input holds nothing for it.
    """
    OPTIONAL = "optional"
    REQUIRED = "required"
    PROMPT = "prompt"
    MASKED_PROMPT = "masked-prompt"


class ArgumentType(type):
    """
    Metaclass that turns parser classes into introspectable descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages (e.g. "array-operand 'metavar' cannot be empty").
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options,
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(names={'-v', '--value'}, metavar='VALUE', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate shared parser metadata.

    - mapper: must be callable (string → value). Its signature is trusted.
    - descr: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string after trimming.

    Raises
    - TypeError: if 'mapper' is not callable or 'descr' is not a string or Unset.
    - ValueError: if 'descr' is a string but empty after trimming.
    """
    if not callable(metadata["mapper"]):
        raise TypeError(f"{cls.__typename__} 'mapper' must be callable")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

    metadata["descr"] = coalesce(descr)


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate and normalize the names of option-like parsers.

    Each name must be a non-empty string matching a shell-style option
    pattern; accepted forms include "-x", "-a3", "-long", "--long-name".
    Unicode letters are allowed. Duplicates are rejected and the collection
    is normalized into a frozenset (order is not significant).

    Name format regex: r"--?[^\W\d_](-?[^\W_]+)*"
    """
    names = set()
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.__typename__} names must be valid shell-style option names (unicodes are allowed)")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.add(name)

    metadata["names"] = frozenset(names)


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-taking parsers.

    - metavar: Unset or a non-empty string. Defaults to the upper-cased mapper
      name ("INTEGER", "PATH"), or to 'fallback' for the identity mapper.
    - necessity: must be a Necessity member.
    - prompt: Unset or a non-empty string. Defaults to "<metavar>: ".
    - default: not validated; any value (including None) is accepted and used
      as-is under OPTIONAL.
    """
    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")

    if metavar is Unset and metadata["mapper"] is not noop:
        metavar = getattr(metadata["mapper"], "__name__", "").upper().replace("_", "-") or Unset
    metadata["metavar"] = coalesce(metavar, metadata.pop("fallback"))

    if not isinstance(metadata["necessity"], Necessity):
        raise TypeError(f"{cls.__typename__} 'necessity' must be a necessity")

    if not isinstance(prompt := metadata["prompt"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'prompt' must be a string")
    elif isinstance(prompt, str) and not prompt.strip():
        raise ValueError(f"{cls.__typename__} 'prompt' cannot be empty")
    metadata["prompt"] = coalesce(prompt, f"{metadata['metavar']}: ")


def _claim(arguments, predicate, /):
    """
    Remove and return the first unit satisfying predicate (None when absent).
    """
    for position, argument in enumerate(arguments):
        if predicate(argument):
            return arguments.pop(position)
    return None


def _map(parser, raw, argument=None, /):
    """
    Apply the parser's mapper to one raw value.

    Any exception raised by the mapper is re-raised as a ValueMappingError
    chained to it; the caller records it in the result.
    """
    try:
        return parser.mapper(raw)
    except Exception as exception:
        where = "at %s position" % ordinal(argument.index + 1) if argument else "from prompt"
        if choices := getattr(parser.mapper, "choices", ()):
            hint = "expected one of %s" % ", ".join(map(repr, choices))
        else:
            hint = "expected a value accepted by %r" % getattr(parser.mapper, "__name__", "mapper")
        raise ValueMappingError(
            "invalid value %r for %s %s: %s" % (raw, parser.label, where, exception),
            title="invalid value",
            code=FaultCode.VALUE_MAPPING,
            hint=hint,
            parser=parser,
            argument=argument,
            raw=raw,
            cause=exception,
        ) from exception


def _resolve(parser, index, result, prompter, /):
    """
    Apply the parser's necessity after it matched nothing.

    Returns the prompted raw line for PROMPT/MASKED_PROMPT, Unset otherwise
    (the default was recorded or the parser was reported missing).
    """
    match parser.necessity:
        case Necessity.OPTIONAL:
            result.record(index, parser.default)
        case Necessity.REQUIRED:
            result.miss(parser)
        case Necessity.PROMPT:
            return prompter.readline(parser.prompt)
        case Necessity.MASKED_PROMPT:
            return prompter.readmasked(parser.prompt)
    return Unset


def _label(names, /):
    """Display name of an option-like parser: its longest spelling."""
    return max(sorted(names), key=len)


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only option.

    When any of its names appears, the flag yields its flag value: True when
    'value' is Unset, otherwise mapper(value). When absent, it yields 'default'
    (None unless configured) as-is. A flag is never reported missing.
    """

    __introspectable__ = (
        "names",
        "value",
        "default",
        "mapper",
        "descr",
    )

    def __new__(cls, *names, value=Unset, default=None, mapper=noop, descr=Unset):
        metadata = {
            "names": names,
            "value": value,
            "default": default,
            "mapper": mapper,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        if not isinstance(value, str | Unset):
            raise TypeError(f"{cls.__typename__} 'value' must be a string")
        elif isinstance(value, str) and not value:
            raise ValueError(f"{cls.__typename__} 'value' cannot be empty")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def label(self):
        return _label(self._names)

    def parse(self, index, arguments, result, prompter, /):
        claimed = _claim(arguments, lambda argument: argument.kind is Kind.OPTION and argument.text in self._names)
        if claimed is None:
            return result.record(index, self._default)
        if self._value is Unset:
            return result.record(index, True)
        try:
            result.record(index, _map(self, self._value, claimed))
        except ValueMappingError as error:
            result.fail(error)


class Option[_T](metaclass=ArgumentType):
    """
    Named, value-taking option.

    Accepted spellings for a name '-r'/'--root':
    - spaced: '--root VALUE', '-r VALUE'
    - inline: '--root=VALUE'
    - attached (single-char names): '-rVALUE', '-frVALUE' with -f a flag

    Only the first occurrence is claimed; repeats are left to be reported
    as unknown arguments.
    """

    __introspectable__ = (
        "names",
        "metavar",
        "mapper",
        "necessity",
        "default",
        "prompt",
        "descr",
    )

    def __new__(
            cls,
            *names,
            metavar=Unset,
            mapper=noop,
            necessity=Necessity.OPTIONAL,
            default=None,
            prompt=Unset,
            descr=Unset,
    ):
        metadata = {
            "names": names,
            "metavar": metavar,
            "mapper": mapper,
            "necessity": necessity,
            "default": default,
            "prompt": prompt,
            "descr": descr,
            "fallback": "VALUE",
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def label(self):
        return _label(self._names)

    def parse(self, index, arguments, result, prompter, /):
        argument = _claim(arguments, lambda argument: argument.kind is Kind.OPTION and argument.text in self._names)

        if argument is None:
            if (raw := _resolve(self, index, result, prompter)) is Unset:
                return
        elif argument.misplaced:
            return result.fail(GroupingError(
                "option %r in %r at %s position takes a value and must be placed at the end of its group" % (
                    argument.text, argument.source, ordinal(argument.index + 1)
                ),
                title="misplaced option in group",
                code=FaultCode.GROUPED_OPTION_VALUE,
                hint="move %r to the end of the group, or pass it on its own (for example: %s <%s>)" % (
                    argument.text, argument.text, self._metavar
                ),
                parser=self,
                argument=argument,
            ))
        elif argument.value is Unset:
            return result.fail(MissingValueError(
                "missing value for option %r at %s position" % (argument.text, ordinal(argument.index + 1)),
                title="missing option value",
                code=FaultCode.MISSING_VALUE,
                hint="pass a value after %r (for example: %s <%s>)" % (argument.text, argument.text, self._metavar),
                parser=self,
                argument=argument,
            ))
        else:
            raw = argument.value

        try:
            result.record(index, _map(self, raw, argument))
        except ValueMappingError as error:
            result.fail(error)


class Operand[_T](metaclass=ArgumentType):
    """
    Positional value claimed by its operand position (0-based, counting
    operand units only). Required unless told otherwise.
    """

    __introspectable__ = (
        "position",
        "metavar",
        "mapper",
        "necessity",
        "default",
        "prompt",
        "descr",
    )

    def __new__(
            cls,
            position,
            /,
            metavar=Unset,
            mapper=noop,
            necessity=Necessity.REQUIRED,
            default=None,
            prompt=Unset,
            descr=Unset,
    ):
        if not isinstance(position, int) or isinstance(position, bool):
            raise TypeError(f"{cls.__typename__} 'position' must be an integer")
        elif position < 0:
            raise ValueError(f"{cls.__typename__} 'position' cannot be negative")

        metadata = {
            "position": position,
            "metavar": metavar,
            "mapper": mapper,
            "necessity": necessity,
            "default": default,
            "prompt": prompt,
            "descr": descr,
            "fallback": f"ARG{position}",
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def label(self):
        return self._metavar

    def parse(self, index, arguments, result, prompter, /):
        argument = _claim(arguments, lambda argument: argument.kind is Kind.OPERAND and argument.position == self._position)

        if argument is None:
            if (raw := _resolve(self, index, result, prompter)) is Unset:
                return
        else:
            raw = argument.text

        try:
            result.record(index, _map(self, raw, argument))
        except ValueMappingError as error:
            result.fail(error)


class ArrayOperand[_T](metaclass=ArgumentType):
    """
    Every operand left unclaimed, in order, mapped one by one into a tuple.

    A prompted line is split on whitespace. The default (OPTIONAL) is an
    empty tuple.
    """

    __introspectable__ = (
        "metavar",
        "mapper",
        "necessity",
        "default",
        "prompt",
        "descr",
    )

    def __new__(
            cls,
            metavar=Unset,
            /,
            mapper=noop,
            necessity=Necessity.OPTIONAL,
            default=(),
            prompt=Unset,
            descr=Unset,
    ):
        metadata = {
            "metavar": metavar,
            "mapper": mapper,
            "necessity": necessity,
            "default": default,
            "prompt": prompt,
            "descr": descr,
            "fallback": "ARGS",
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def label(self):
        return self._metavar

    def parse(self, index, arguments, result, prompter, /):
        claimed = [argument for argument in arguments if argument.kind is Kind.OPERAND]
        for argument in claimed:
            arguments.remove(argument)

        if claimed:
            pairs = [(argument.text, argument) for argument in claimed]
        elif (raw := _resolve(self, index, result, prompter)) is Unset:
            return
        else:
            pairs = [(part, None) for part in raw.split()]

        values, failed = [], False
        for raw, argument in pairs:
            try:
                values.append(_map(self, raw, argument))
            except ValueMappingError as error:
                result.fail(error)
                failed = True
        if not failed:
            result.record(index, tuple(values))


__all__ = (
    "Necessity",
    "Flag",
    "Option",
    "Operand",
    "ArrayOperand",
)
