import sys

from rich.pretty import pprint

from commandant import *
from commandant.mappers import integer, path


@command
def copy(
        source=Operand(0, mapper=path, descr="file to copy"),
        target=Operand(1, mapper=path, descr="destination"),
        times=Option("-n", "--times", mapper=integer, default=1, descr="how many copies"),
        force=Flag("-f", "--force", descr="overwrite existing files"),
        /,
):
    """Copy a file, any number of times."""
    pprint((source, target, times, force))


@command
def login(
        user=Operand(0, descr="account name"),
        secret=Option("-p", "--password", necessity=Necessity.MASKED_PROMPT, prompt="password: "),
        /,
):
    """Log in with a password (asked for when not given)."""
    pprint((user, "*" * len(secret)))


app = Commander("demo", copy, login, descr="Commandant demo program")


if __name__ == '__main__':
    sys.exit(invoke(app))
