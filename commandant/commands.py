"""
Commandant commands, commanders and the process boundary.

Scope
- Command: a named unit owning an ordered list of argument parsers and one
  instruction (the callable doing the actual work). execute() runs the whole
  pipeline: tokenize → match every parser → fail with one aggregated
  ParsingFailure, or call the instruction with the ordered values.
- Commander: a named registry of commands; execute() routes on the first
  token, or shows the commander help.
- command(): decorator/factory building a Command from a callable, either with
  explicit parsers or from the parser defaults of its positional parameters.
- invoke(): run a command/commander on sys.argv, a shell-like string or a list
  of tokens, print help to stdout and faults to stderr, return the exit code.

Lifecycle
- Commands and commanders are built once, validated at construction, and are
  immutable afterwards. Every execute() call allocates its own state, so one
  instance may serve concurrent calls.

Help
- '--help' and '-h' request help unless the command declares them itself.
  For a commander, help is shown on empty input or when the first token is a
  help token.
"""
import difflib
import inspect
import logging
import re
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console

from .arguments import ArgumentType, Necessity, Flag, Option, Operand, ArrayOperand
from .faults import *
from .inputs import Kind, tokenize
from .pages import HelpPage, HelpSection, HelpRow
from .prompts import Prompter, ConsolePrompter
from .results import ParsingResult
from .utils import *

logger = logging.getLogger(__name__)

HELPERS = frozenset({"--help", "-h"})

PARSERS = (Flag, Option, Operand, ArrayOperand)


class CommandType(ArgumentType):
    """
    Metaclass for Command/Commander: same introspection contract as the
    argument parsers (typename, mirrored read-only fields, stable repr).
    """


def _process_source(cls, metadata):
    """
    Derive parsers, name and description from the instruction when omitted.

    - parsers: when none are given explicitly, every parameter of the
      instruction must be positional and default to an argument parser; the
      defaults become the parsers, in parameter order.
    - name: the instruction's __name__, lowercased with '_' → '-'.
    - descr: the first paragraph of the instruction's docstring.
    """
    instruction = metadata["instruction"]
    if not callable(instruction):
        raise TypeError(f"{cls.__typename__} instruction must be callable")

    if not metadata["parsers"]:
        parsers = []
        for parameter in inspect.signature(instruction).parameters.values():
            if parameter.kind not in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
                raise TypeError(f"{cls.__typename__} parameter {parameter.name!r} must be positional")
            if not isinstance(parameter.default, PARSERS):
                raise TypeError(f"{cls.__typename__} parameter {parameter.name!r} must default to an argument parser")
            parsers.append(parameter.default)
        metadata["parsers"] = tuple(parsers)

    if metadata["name"] is Unset:
        metadata["name"] = getattr(instruction, "__name__", "").replace("_", "-").lower()

    if metadata["descr"] is Unset and (doc := inspect.getdoc(instruction)):
        metadata["descr"] = doc.split("\n\n")[0].strip() or Unset


def _process_strings(cls, metadata):
    """
    Validate name and description.

    - name: non-empty, lower-kebab friendly (letters/digits separated by single
      hyphens); case is preserved and lookups are case-sensitive.
    - descr: Unset or a non-empty string; Unset becomes None.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\W_](-?[^\W_]+)*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid command name (e.g. 'copy-files')")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _process_parsers(cls, metadata):
    """
    Validate the parser list of a command.

    - every entry is a Flag, Option, Operand or ArrayOperand;
    - option names are unique across all option-like parsers;
    - operand positions are exactly 0..n-1;
    - at most one ArrayOperand, declared after every Operand.
    """
    names = set()
    positions = []
    array = None

    for index, parser in enumerate(metadata["parsers"]):
        if not isinstance(parser, PARSERS):
            raise TypeError(f"{cls.__typename__} parsers must be flags, options, operands or array-operands")
        if isinstance(parser, Flag | Option):
            if duplicates := names & parser.names:
                raise ValueError(f"{cls.__typename__} option name {sorted(duplicates)[0]!r} is already in use")
            names |= parser.names
        elif isinstance(parser, Operand):
            if array is not None:
                raise ValueError(f"{cls.__typename__} operands must be declared before the array-operand")
            positions.append(parser.position)
        elif array is not None:
            raise ValueError(f"{cls.__typename__} cannot have more than one array-operand")
        else:
            array = index

    if sorted(positions) != list(range(len(positions))):
        raise ValueError(f"{cls.__typename__} operand positions must be contiguous starting at 0 (got {sorted(positions)})")

    metadata["parsers"] = tuple(metadata["parsers"])


def _tokens(tokens, caller, /):
    """
    Validate a pre-tokenized input and return it as a list of strings.
    """
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError(f"{caller}() argument must be an iterable of strings")
    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"{caller}() argument must be an iterable of strings")
    return tokens


def _note(parser, /):
    """Short necessity/default note shown next to a parser in help."""
    if isinstance(parser, Flag):
        return None if parser.default is None else f"default: {parser.default}"
    match parser.necessity:
        case Necessity.REQUIRED:
            return "required"
        case Necessity.PROMPT:
            return "prompted"
        case Necessity.MASKED_PROMPT:
            return "prompted, hidden"
    if parser.default is None or parser.default == ():
        return None
    return f"default: {parser.default}"


class Command(metaclass=CommandType):
    """
    Named unit of work: ordered argument parsers plus one instruction.

    The instruction is called with one positional argument per parser, in
    declaration order. A Command is also callable itself, forwarding to the
    instruction unchanged.

    Faults raised by execute()
    - HelpCall: help was requested (not a failure, exit code 0).
    - ParsingFailure: aggregated grouping/missing/unknown/mapping faults.
    - InstructionFailure: the instruction raised (original exception chained).
    """

    __introspectable__ = (
        "name",
        "descr",
        "parsers",
        "instruction",
    )

    __displayable__ = (
        "name",
        "descr",
        "parsers",
    )

    def __new__(cls, instruction, /, *parsers, name=Unset, descr=Unset):
        metadata = {
            "instruction": instruction,
            "parsers": parsers,
            "name": name,
            "descr": descr,
        }
        _process_source(cls, metadata)
        _process_strings(cls, metadata)
        _process_parsers(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        options = [parser for parser in self._parsers if isinstance(parser, Flag | Option)]
        self._names = frozenset().union(*(parser.names for parser in options))
        self._valued = frozenset().union(*(parser.names for parser in options if isinstance(parser, Option)))
        self._helpers = HELPERS - self._names
        self._prompting = any(
            getattr(parser, "necessity", None) in (Necessity.PROMPT, Necessity.MASKED_PROMPT)
            for parser in self._parsers
        )
        return self

    def __call__(self, *args, **kwargs):
        return self._instruction(*args, **kwargs)

    @property
    def page(self):
        """
        Structured help content of this command.

        Sections
        - options: flags and options (names, metavar, description, necessity note)
        - operands: operands by position, then the array-operand
        """
        options, operands = [], []
        usage = ["[OPTIONS]"] if self._names else []

        for parser in self._parsers:
            if isinstance(parser, Flag | Option):
                names = sorted(parser.names, key=lambda name: (name.startswith("--"), len(name), name))
                label = " | ".join(names)
                if isinstance(parser, Option):
                    label += f" {parser.metavar}"
                options.append(HelpRow(label, parser.descr, _note(parser)))

        ordered = sorted((parser for parser in self._parsers if isinstance(parser, Operand)), key=lambda parser: parser.position)
        ordered += [parser for parser in self._parsers if isinstance(parser, ArrayOperand)]
        for parser in ordered:
            if isinstance(parser, ArrayOperand):
                label = f"{parser.metavar} ..."
            else:
                label = parser.metavar
            usage.append(label if parser.necessity is Necessity.REQUIRED else f"[{label}]")
            operands.append(HelpRow(label, parser.descr, _note(parser)))

        return HelpPage(
            self._name,
            self._descr,
            usage=" ".join(usage) or None,
            sections=(HelpSection("options", tuple(options)), HelpSection("operands", tuple(operands))),
        )

    def _prompter(self, prompter):
        if prompter is Unset:
            return ConsolePrompter() if self._prompting else Unset
        if not isinstance(prompter, Prompter):
            raise TypeError(f"{type(self).__typename__} prompter must provide readline() and readmasked()")
        return prompter

    def _match(self, arguments, prompter):
        result = ParsingResult(len(self._parsers))
        arguments = list(arguments)
        for index, parser in enumerate(self._parsers):
            parser.parse(index, arguments, result, prompter)
        for argument in arguments:
            result.reject(argument)
        return result

    def _faults(self, result):
        """
        Turn an invalid result into the list of faults to aggregate:
        missing parsers first, then per-parser errors, then unknown units.
        """
        faults = []

        for parser in result.missing:
            faults.append(MissingArgumentError(
                "missing required %s %r" % (type(parser).__typename__, parser.label),
                title="missing argument",
                code=FaultCode.MISSING_ARGUMENT,
                hint="provide %s, or run '%s --help' to see all arguments" % (parser.label, self._name),
                parser=parser,
                command=self,
            ))

        faults.extend(result.errors)

        for argument in result.unknown:
            where = "at %s position" % ordinal(argument.index + 1)
            if argument.source != argument.text:
                where = "in %r %s" % (argument.source, where)

            if argument.kind is Kind.OPERAND:
                message = "unexpected operand %r %s" % (argument.text, where)
                hint = "run '%s --help' to see the expected operands" % self._name
            elif argument.text in self._names:
                message = "option %r %s was already given" % (argument.text, where)
                hint = "pass %r only once" % argument.text
            else:
                message = "unknown option %r %s" % (argument.text, where)
                try:
                    suggestion = difflib.get_close_matches(argument.text, self._names, 1)[0]
                    hint = "did you mean %r? you can also run '%s --help' to see all options" % (suggestion, self._name)
                except IndexError:
                    hint = "run '%s --help' to see all available options" % self._name

            faults.append(UnknownArgumentError(
                message,
                title="unknown argument",
                code=FaultCode.UNKNOWN_ARGUMENT,
                hint=hint,
                argument=argument,
                command=self,
            ))

        return faults

    def parse(self, tokens=(), /, prompter=Unset):
        """
        Match the parsers against tokens and return the ParsingResult.

        Nothing is raised for bad input and the instruction is not called;
        help tokens are treated like any other undeclared option.
        """
        arguments = tokenize(_tokens(tokens, "parse"), self._names, self._valued)
        return self._match(arguments, self._prompter(prompter))

    def execute(self, tokens=(), /, prompter=Unset):
        """
        Parse tokens and call the instruction with the ordered values.

        Parameters
        - tokens: Iterable[str] (the command name already removed).
        - prompter: Prompter used by PROMPT/MASKED_PROMPT parsers (a
          ConsolePrompter when omitted).

        Returns
        - whatever the instruction returns.
        """
        arguments = tokenize(_tokens(tokens, "execute"), self._names, self._valued)

        if any(argument.kind is Kind.OPTION and argument.text in self._helpers for argument in arguments):
            logger.debug("help requested for command %r", self._name)
            raise HelpCall(self.page, command=self)

        result = self._match(arguments, self._prompter(prompter))

        if not result.valid:
            logger.debug(
                "command %r rejected input: %d missing, %d unknown, %d errors",
                self._name, len(result.missing), len(result.unknown), len(result.errors),
            )
            raise ParsingFailure(self._faults(result), command=self, result=result)

        logger.debug("invoking command %r with %r", self._name, result.values)
        try:
            return self._instruction(*result.values)
        except Exception as exception:
            raise InstructionFailure(
                "exception during invocation of command %r: %s" % (self._name, exception),
                title="command failed",
                code=FaultCode.INSTRUCTION_FAILURE,
                hint="this is raised by the command itself, not by the given arguments",
                command=self,
                cause=exception,
            ) from exception


class Commander(metaclass=CommandType):
    """
    Named registry of commands, routing on the first input token.

    Command names are unique and looked up case-sensitively.
    """

    __introspectable__ = (
        "name",
        "descr",
        "commands",
    )

    def __new__(cls, name, /, *commands, descr=Unset):
        metadata = {
            "name": name,
            "descr": descr,
        }
        _process_strings(cls, metadata)

        registry = {}
        for command in commands:
            if not isinstance(command, Command):
                raise TypeError(f"{cls.__typename__} commands must be commands")
            if registry.setdefault(command.name, command) is not command:
                raise ValueError(f"{cls.__typename__} command name {command.name!r} is already in use")

        self = super().__new__(cls)
        self._name = metadata["name"]
        self._descr = metadata["descr"]
        self._commands = registry
        return self

    def __getitem__(self, name, /):
        return self._commands[name]

    def __contains__(self, name, /):
        return name in self._commands

    @property
    def page(self):
        """Structured help content: every command with its description."""
        return HelpPage(
            self._name,
            self._descr,
            usage="COMMAND [ARGS ...]",
            sections=(HelpSection("commands", tuple(
                HelpRow(name, command.descr) for name, command in self._commands.items()
            )),),
        )

    def execute(self, tokens=(), /, prompter=Unset):
        """
        Route tokens to a command and return what its instruction returns.

        Raises HelpCall on empty input or a leading help token, and
        UnknownCommandError when the first token names no command; anything
        raised by Command.execute propagates unchanged.
        """
        tokens = _tokens(tokens, "execute")

        if not tokens or tokens[0] in HELPERS:
            logger.debug("help requested for commander %r", self._name)
            raise HelpCall(self.page, commander=self)

        name, *rest = tokens
        try:
            command = self._commands[name]
        except KeyError:
            suggestions = difflib.get_close_matches(name, self._commands.keys(), 5)
            try:
                hint = "did you mean %r? you can also run '%s --help' to see all commands" % (suggestions[0], self._name)
            except IndexError:
                hint = "run '%s --help' to see all available commands" % self._name
            raise UnknownCommandError(
                "could not find command %r for input arguments %r" % (name, shlex.join(tokens)),
                title="unknown command",
                code=FaultCode.UNKNOWN_COMMAND,
                hint=hint,
                input=name,
                tokens=tuple(tokens),
                suggestions=suggestions,
                commander=self,
            ) from None

        logger.debug("commander %r dispatching to command %r", self._name, name)
        return command.execute(rest, prompter)


def command(source=Unset, /, *parsers, name=Unset, descr=Unset):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct: cmd = command(func, Operand(0), Flag("-v"), name="x")
    - Decorator with parser defaults:
        @command
        def copy(source=Operand(0), target=Operand(1), /): ...
    - Decorator with explicit parsers/metadata:
        @command(Operand(0), Flag("-v"), name="copy")
        def copy(source, verbose): ...

    Returns
    - Command | Callable[[Callable], Command]
    """
    if isinstance(source, PARSERS):
        source, parsers = Unset, (source, *parsers)

    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *parsers, name=name, descr=descr)

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /, *, prompter=Unset, fancy=False, colorful=True, styles=Unset, stdout=Unset, stderr=Unset):
    """
    Run a command or commander as a program and return its exit code.

    Parameters
    - object: Command | Commander, or a plain callable (wrapped with command()).
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string; split via shlex.split.
      • Iterable[str]: pre-tokenized sequence.
    - prompter: Prompter for PROMPT/MASKED_PROMPT parsers.
    - fancy/colorful/styles: rendering options for help and faults.
    - stdout/stderr: rich Consoles for help and faults (standard streams by default).

    Returns
    - int: 0 on success or help, otherwise the fault's exit code (1).

    Anything that is not a commandant fault (KeyboardInterrupt, EOFError from
    a prompt, ...) propagates.
    """
    if not isinstance(object, Command | Commander):
        if not callable(object):
            raise TypeError("invoke() first argument must be a command, a commander or a callable")
        object = command(object)

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    else:
        tokens = _tokens(prompt, "invoke")

    options = {"prog": object.name, "fancy": bool(fancy), "colorful": bool(colorful)}
    if styles is not Unset:
        options["styles"] = styles

    try:
        object.execute(tokens, prompter)
    except HelpCall as call:
        (stdout if stdout is not Unset else Console()).print(call.__replace__(**options))
        return call.exitcode
    except (CommandException, ParsingFailure) as fault:
        logger.debug("%s failed with %s", object.name, type(fault).__name__, exc_info=True)
        (stderr if stderr is not Unset else Console(stderr=True)).print(fault.__replace__(**options))
        return fault.exitcode
    return 0


__all__ = (
    "Command",
    "Commander",
    "command",
    "invoke",
)

del CommandType
