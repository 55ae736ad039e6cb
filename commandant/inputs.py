"""
Commandant input model and tokenizer.

Scope
- InputArgument: one token, or one unit derived from a token, of the raw
  input handed to a command.
- tokenize(): split the raw token sequence into InputArgument units, relative
  to the option vocabulary of the command that will consume them.

Rules (applied left to right)
- option token: longer than one char, starts with '-', is not exactly '--',
  has no whitespace and is not a negative number ('-5', '-2.5') unless a
  declared option carries that exact spelling.
- a token equal to a declared name is one unit (greedy: a declared '-a3' is
  never read as the group '-a' '-3').
- '--name=value' (or '-name=value') on a declared value-taking option is one
  unit carrying 'value'.
- a single-dash group of letters/digits ('-rf', '-r42') is split per char:
  • flag chars become bare units;
  • a value-taking char in last place takes the following token as value;
  • a value-taking char followed only by declared short names is marked
    misplaced (the parser reports the grouping fault) and splitting goes on;
  • otherwise the rest of the group is its attached value ('-r42' → '42').
- a value-taking unit without a value takes the next token when that token is
  not an option token ('--' is accepted as a value).
- the first '--' not taken as a value is dropped; every later token is an
  operand.
- operands are numbered 0, 1, 2, … in order of appearance.

Nothing is kept between calls; the output is a fresh list.
"""
import enum
import re
from typing import NamedTuple

from .utils import Unset

DELIMITER = "--"

_NUMBER = re.compile(r"-\d+(\.\d*)?([eE][-+]?\d+)?")
_GROUP = re.compile(r"-[^\W_]+")


class Kind(enum.Enum):
    OPTION = "option"
    OPERAND = "operand"


class InputArgument(NamedTuple):
    """
    One unit of tokenized input.

    Fields
    - kind: Kind.OPTION or Kind.OPERAND.
    - text: option spelling ('-r', '--a3') or the operand text.
    - source: the raw token this unit was derived from (e.g. '-rf' for '-f').
    - index: 0-based index of the source token in the raw input.
    - position: index among operand units (None for options).
    - value: raw value carried by an option unit, or Unset.
    - misplaced: the unit is a value-taking option grouped before other options.
    """
    kind: Kind
    text: str
    source: str
    index: int
    position: int | None = None
    value: str | object = Unset
    misplaced: bool = False

    @property
    def option(self):
        return self.kind is Kind.OPTION

    @property
    def operand(self):
        return self.kind is Kind.OPERAND


def optionlike(token, /, names=frozenset()):
    """
    Tell whether a raw token reads as an option rather than an operand/value.
    """
    if token in names:
        return True
    return (
        len(token) > 1 and
        token.startswith("-") and
        token != DELIMITER and
        not any(char.isspace() for char in token) and
        not _NUMBER.fullmatch(token)
    )


def _split(token, index, names, valued, shorts):
    """
    Split one option token into units.

    Returns the list of units; the last one may be a value-taking option still
    waiting for its value (value is Unset and misplaced is False).
    """
    if token in names:
        return [InputArgument(Kind.OPTION, token, token, index)]

    name, equals, value = token.partition("=")
    if equals and name in valued:
        return [InputArgument(Kind.OPTION, name, token, index, value=value)]

    if not _GROUP.fullmatch(token) or not any(char in shorts for char in token[1:]):
        # unknown spelling, kept whole so it is reported as typed
        return [InputArgument(Kind.OPTION, token, token, index)]

    units = []
    chars = token[1:]
    for offset, char in enumerate(chars):
        name, rest = "-" + char, chars[offset + 1:]
        if name not in valued:
            units.append(InputArgument(Kind.OPTION, name, token, index))
        elif not rest:
            units.append(InputArgument(Kind.OPTION, name, token, index))
        elif all(other in shorts for other in rest):
            units.append(InputArgument(Kind.OPTION, name, token, index, misplaced=True))
        else:
            units.append(InputArgument(Kind.OPTION, name, token, index, value=rest))
            break
    return units


def tokenize(tokens, /, names=(), valued=()):
    """
    Split raw tokens into InputArgument units.

    Parameters
    - tokens: Iterable[str]
      The raw input (command name already removed).
    - names: Iterable[str]
      Every option spelling declared by the consuming command.
    - valued: Iterable[str]
      The subset of names that take a value.

    Returns
    - list[InputArgument]: units in input order.
    """
    tokens = list(tokens)
    names = frozenset(names)
    valued = frozenset(valued) & names
    shorts = {name[1] for name in names if len(name) == 2 and name[1] != "-"}

    arguments = []
    position = 0
    delimited = False
    index = 0

    while index < len(tokens):
        token = tokens[index]

        if delimited or not optionlike(token, names):
            if token == DELIMITER and not delimited:
                delimited = True
            else:
                arguments.append(InputArgument(Kind.OPERAND, token, token, index, position=position))
                position += 1
            index += 1
            continue

        units = _split(token, index, names, valued, shorts)
        last = units[-1]
        if (
            last.text in valued and
            last.value is Unset and
            not last.misplaced and
            index + 1 < len(tokens) and
            not optionlike(tokens[index + 1], names)
        ):
            units[-1] = last._replace(value=tokens[index + 1])
            index += 1

        arguments.extend(units)
        index += 1

    return arguments


__all__ = (
    "Kind",
    "InputArgument",
    "optionlike",
    "tokenize",
    "DELIMITER",
)
