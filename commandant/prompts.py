"""
Commandant prompters (interactive input for PROMPT / MASKED_PROMPT parsers).

A prompter is any object with two blocking methods:
- readline(prompt) -> str      read one line, echoing typed characters;
- readmasked(prompt) -> str    read one line without echo (secrets).

ConsolePrompter reads from the terminal through rich; ScriptedPrompter replays
fixed answers and records the prompts it was asked, for tests and
non-interactive runs.
"""
import logging
from collections import deque
from typing import Protocol, runtime_checkable

from rich.console import Console

from .utils import Unset

logger = logging.getLogger(__name__)


@runtime_checkable
class Prompter(Protocol):
    def readline(self, prompt, /): ...

    def readmasked(self, prompt, /): ...


class ConsolePrompter:
    """
    Prompter backed by a rich Console (stdin/stdout by default).

    No timeout: the calling thread blocks until a line arrives; EOFError and
    KeyboardInterrupt propagate to the caller.
    """

    def __init__(self, console=Unset, /):
        if not isinstance(console, Console | Unset):
            raise TypeError("console-prompter 'console' must be a rich console")
        self._console = console if console is not Unset else Console()

    @property
    def console(self):
        return self._console

    def readline(self, prompt, /):
        logger.debug("prompting for %r", prompt)
        return self._console.input(prompt)

    def readmasked(self, prompt, /):
        logger.debug("prompting (masked) for %r", prompt)
        return self._console.input(prompt, password=True)


class ScriptedPrompter:
    """
    Prompter replaying a fixed sequence of answers.

    Both methods consume the same queue; the prompts asked are recorded in
    'prompts' as (prompt, masked) pairs. Running out of answers raises
    EOFError, as a closed terminal would.
    """

    def __init__(self, *lines):
        for line in lines:
            if not isinstance(line, str):
                raise TypeError("scripted-prompter lines must be strings")
        self._lines = deque(lines)
        self._prompts = []

    @property
    def prompts(self):
        return tuple(self._prompts)

    @property
    def remaining(self):
        return tuple(self._lines)

    def _next(self, prompt, masked):
        self._prompts.append((prompt, masked))
        try:
            return self._lines.popleft()
        except IndexError:
            raise EOFError(f"no scripted answer left for {prompt!r}") from None

    def readline(self, prompt, /):
        return self._next(prompt, False)

    def readmasked(self, prompt, /):
        return self._next(prompt, True)


__all__ = (
    "Prompter",
    "ConsolePrompter",
    "ScriptedPrompter",
)
