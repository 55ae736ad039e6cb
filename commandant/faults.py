"""
Commandant faults (errors and signals) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
- CommandException: base type for single faults; carries a message plus
  options (title, code, hint, context) and knows how to render itself in a
  friendly, lowercased, and actionable way.
- ParsingFailure: the aggregated fault of one parse pass (an ExceptionGroup of
  every grouping, missing, unknown and mapping fault found).
- HelpCall: the non-failure terminal signal raised when help is requested.

Exit codes
- HelpCall exits with 0; every fault exits with 1.

Rendering
- Every fault implements __rich__ and can be printed on a rich Console.
  Runtime options (prog, fancy, colorful) are merged in via __replace__ by the
  caller doing the printing (see commands.invoke).
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

STYLES = MappingProxyType({
    # header parts
    "prog-name": "bold #E6E6F0",  # near-white program name
    "code": "bold #00E5FF",  # neon cyan fault code
    "error-title": "bold #FF4DA6",  # friendly pinky title
    "title": "bold #FF4DA6",  # aggregated group title

    # body
    "error-message": "#C8C8D0",  # soft light gray message
    "hint-arrow": "#9CE19C dim",  # gentle green arrow
    "hint": "italic #9CE19C",  # gentle green hint text
})


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND
    - arguments (1111x)
      • GROUPED_OPTION_VALUE, MISSING_ARGUMENT, MISSING_VALUE,
        UNKNOWN_ARGUMENT, VALUE_MAPPING
    - aggregation (1112x)
      • INVALID_ARGUMENTS
    - delegated (1113x)
      • INSTRUCTION_FAILURE
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11101

    # --- argument errors (11xxx) ---
    GROUPED_OPTION_VALUE        = 11111
    MISSING_ARGUMENT            = 11112
    MISSING_VALUE               = 11113
    UNKNOWN_ARGUMENT            = 11114
    VALUE_MAPPING               = 11115

    # --- aggregated errors (11xxx) ---
    INVALID_ARGUMENTS           = 11121

    # --- delegated errors (11xxx) ---
    INSTRUCTION_FAILURE         = 11131


def _styler(options):
    styles = defaultdict(str, STYLES | dict(options.get("styles", {})))

    def styler(style):
        return styles[style] if options.get("colorful", True) else ""

    return styler


def _text(options):
    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not options.get("colorful", True):
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    return text


class CommandException(Exception):
    """
    Base class of every single, user-facing fault.

    Options commonly carried
    - title: short lowercased title shown in the header.
    - code: FaultCode.
    - hint: one actionable sentence.
    - prog/fancy/colorful/styles: rendering options (merged in by invoke()).
    - any context the reporter wants to expose (argument, parser, command, ...).
    """
    exitcode = 1

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def title(self):
        return self.options.get("title", "")

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        styler, text = _styler(self.options), _text(self.options)

        header = Text.assemble(
            "[ ",
            text(self.options.get("prog", "command"), styler("prog-name")),
            " — ",
            text(str(self.code.value if self.code else ""), styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        message = text(coalesce(self.message, ""), styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint")))

        if self.options.get("fancy", False):
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class GroupingError(CommandException):
    """A value-taking option is grouped with other options but not placed last."""


class MissingArgumentError(CommandException):
    """A required parser found no matching input."""


class MissingValueError(CommandException):
    """An option was given but no value could be taken for it."""


class UnknownArgumentError(CommandException):
    """An input unit was claimed by no parser (including repeated options)."""


class ValueMappingError(CommandException):
    """A raw value was rejected by its mapper; the mapper's exception is the cause."""


class UnknownCommandError(CommandException):
    """The first input token names no registered command."""


class InstructionFailure(CommandException):
    """The instruction of a command raised; the original exception is the cause."""


class ParsingFailure(ExceptionGroup[CommandException]):
    """
    Aggregated fault of one parse pass.

    Holds every GroupingError, MissingArgumentError, MissingValueError,
    UnknownArgumentError and ValueMappingError found, each listed on its own.
    The 'result' option carries the ParsingResult the faults were built from.
    """
    exitcode = 1

    def __new__(cls, exceptions, /, **options):
        return super().__new__(cls, "invalid input arguments", exceptions)

    def __init__(self, exceptions, /, **options):
        super().__init__("invalid input arguments", tuple(exceptions))
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return FaultCode.INVALID_ARGUMENTS

    @property
    def result(self):
        return self.options.get("result")

    @property
    def missing(self):
        """Parsers reported missing, in declaration order."""
        return tuple(fault.options["parser"] for fault in self.exceptions if isinstance(fault, MissingArgumentError))

    @property
    def unknown(self):
        """Input units claimed by no parser, in input order."""
        return tuple(fault.options["argument"] for fault in self.exceptions if isinstance(fault, UnknownArgumentError))

    def __rich__(self):
        styler, text = _styler(self.options), _text(self.options)

        prog = text(self.options.get("prog", "command"), styler("prog-name"))
        header = Text.assemble("[ ", prog, " — ", text(self.message.title(), styler("title")), " ]")

        renders = []
        for exception in self.exceptions:
            renders.append(exception.__replace__(**{
                name: self.options[name] for name in ("prog", "colorful", "styles") if name in self.options
            }))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


class HelpCall(Exception):
    """
    Terminal, non-failure outcome: help was requested.

    Carries the HelpPage to show ('page' option) and exits with 0.
    """
    exitcode = 0

    def __init__(self, page, /, **options):
        super().__init__(page.name)
        self.page = page
        self.options = MappingProxyType(options)

    def __rich__(self):
        return self.page.render(
            prog=self.options.get("prog", Unset),
            fancy=self.options.get("fancy", False),
            colorful=self.options.get("colorful", True),
            styles=self.options.get("styles", Unset),
        )

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.page, **{**self.options, **overrides})


__all__ = (
    "FaultCode",
    "CommandException",
    "GroupingError",
    "MissingArgumentError",
    "MissingValueError",
    "UnknownArgumentError",
    "ValueMappingError",
    "UnknownCommandError",
    "InstructionFailure",
    "ParsingFailure",
    "HelpCall",
)
