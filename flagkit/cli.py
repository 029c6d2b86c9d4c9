import sys
import inspect
import logging
import typing as tp
import dataclasses as dt

from typing import Callable, Optional

from . import const, machine, vt100
from .flags import Schema

_logger = logging.getLogger(__name__)

HELP_FLAGS = ("-h", "-help")
EXTRA_SEPARATOR = "--"


class HelpRequested(Exception):
    pass


def _takesExtra(fn: Callable) -> bool:
    """Checks if a command callable accepts the raw string after `--`."""
    return len(inspect.signature(fn).parameters) >= 2


def _extractSchema(fn: Callable) -> Optional[Schema]:
    """Extracts a schema from the type of a command's first parameter."""
    annotations = inspect.get_annotations(fn)
    annotations.pop("return", None)
    if len(annotations) == 0:
        return None

    return Schema.extract(next(iter(annotations.values())))


@dt.dataclass
class Command:
    """
    Represents a command in the command-line interface.

    Options of a command are declared on an argument class with
    `flags.flag()` and parsed by flagkit itself.
    """

    shortName: Optional[str]
    path: list[str] = dt.field(default_factory=list)
    description: str = ""

    schema: Optional[Schema] = None
    callable: Optional[tp.Callable] = None
    takesExtra: bool = False
    subcommands: dict[str, "Command"] = dt.field(default_factory=dict)
    populated: bool = False

    @property
    def longName(self) -> str:
        """Returns the long name of the command."""
        return self.path[-1]

    def _spliceArgs(self, args: list[str]) -> tuple[list[str], list[str]]:
        """Splits the argument list into this command's options and the rest."""
        rest = args[:]
        curr = []
        if len(self.subcommands) > 0:
            while len(rest) > 0 and rest[0].startswith("-") and rest[0] != EXTRA_SEPARATOR:
                curr.append(rest.pop(0))
        else:
            curr = rest
            rest = []
        return curr, rest

    def help(self):
        """Prints the help message for the command."""
        vt100.title(f"{self.longName}")
        print()

        vt100.subtitle("Usage")
        print(vt100.indent(f"{' '.join(self.path)}{self.usage()}"))
        print()

        vt100.subtitle("Description")
        print(vt100.indent(self.description))
        print()

        if self.schema and len(self.schema) > 0:
            vt100.subtitle("Options")
            rows = [
                (f"-{f.name}", f.type.value, f.description) for f in self.schema.flags
            ]
            print(vt100.indent(vt100.table(rows)))
            print()

        if any(self.subcommands):
            vt100.subtitle("Subcommands")
            for name, sub in self.subcommands.items():
                print(
                    vt100.indent(
                        f"{vt100.GREEN}{sub.shortName or ' '}{vt100.RESET}  {name} - {sub.description}"
                    )
                )
            print()

    def usage(self) -> str:
        """Returns a usage string for the command."""
        res = " "
        if self.schema and len(self.schema) > 0:
            res += self.schema.usage() + " "

        if len(self.subcommands) > 0:
            res += "{" + "|".join(self.subcommands.keys()) + "}"
            res += " [args...]"

        if self.takesExtra:
            res += f"[{EXTRA_SEPARATOR} args...]"

        return res.rstrip()

    def lookupSubcommand(self, name: str) -> "Command":
        """Looks up a subcommand by name."""
        if name in self.subcommands:
            return self.subcommands[name]
        for sub in self.subcommands.values():
            if sub.shortName == name:
                return sub
        raise ValueError(f"Unknown subcommand '{name}'")

    def invoke(self, argv: list[str]) -> int:
        """Parses the command's options and invokes it."""
        extra: Optional[str] = None
        if EXTRA_SEPARATOR in argv:
            i = argv.index(EXTRA_SEPARATOR)
            extra = " ".join(argv[i + 1 :])
            argv = argv[:i]

        if any(arg in HELP_FLAGS for arg in argv):
            raise HelpRequested()

        if extra is not None and not self.takesExtra:
            raise ValueError(f"Unexpected '{EXTRA_SEPARATOR}'")

        if self.callable is None:
            return 0

        params = []
        if self.schema is not None:
            params.append(machine.parse(self.schema, " ".join(argv)).into(self.schema))
        elif len(argv) > 0:
            raise ValueError(f"Unexpected argument '{argv[0]}'")

        if self.takesExtra:
            params.append(extra or "")

        return self.callable(*params) or 0

    def eval(self, args: list[str]) -> int:
        """Evaluates the command and its subcommands based on the given arguments."""
        cmd = args.pop(0)
        curr, rest = self._spliceArgs(args)

        try:
            status = self.invoke(curr)
            if status != 0:
                return status

            if self.subcommands:
                if len(rest) > 0:
                    return self.lookupSubcommand(rest[0]).eval(rest)
                print("Usage: " + cmd + self.usage(), end="\n\n")
            elif len(rest) > 0:
                raise ValueError(f"Unknown operand '{rest[0]}'")
            return 0

        except HelpRequested:
            self.help()
            return 0

        except ValueError as e:
            vt100.error(str(e))
            print("Usage: " + cmd + self.usage(), end="\n\n")
            return 1


_root = Command(None, [const.ARGV0])


def _splitPath(path: str) -> list[str]:
    """Splits a command path into its individual components."""
    if path == "/":
        return []
    return path.split("/")


def _resolvePath(path: list[str]) -> Command:
    """Resolves a command path to a `Command` object."""
    cmd = _root
    visited = []
    for name in path:
        visited.append(name)
        if name not in cmd.subcommands:
            cmd.subcommands[name] = Command(None, visited[:])
        cmd = cmd.subcommands[name]
    return cmd


def command(shortName: Optional[str], longName: str, description: str = "") -> Callable:
    """
    Decorator for defining a command.

    The callable receives an instance of the argument class its first
    parameter is annotated with and, when it declares a second parameter,
    the raw argument string found after `--`.

    Args:
        shortName: The short name of the command (e.g., "p" for "parse").
        longName: The path of the command (e.g., "parse", or "/" for the root).
        description: A description of the command.
    """

    def wrap(fn: Callable):
        schema = _extractSchema(fn)
        path = _splitPath(longName)
        cmd = _resolvePath(path)

        _logger.info(f"Registering command '{'.'.join(path)}'")
        if cmd.populated:
            raise ValueError(f"Command '{longName}' is already defined")

        cmd.shortName = shortName
        cmd.description = description
        cmd.schema = schema
        cmd.callable = fn
        cmd.takesExtra = _takesExtra(fn)
        cmd.populated = True
        cmd.path = [const.ARGV0] + path
        return fn

    return wrap


def usage():
    """Prints the usage message for the root command."""
    print(f"Usage: {const.ARGV0}{_root.usage()}")


def exec(argv: Optional[list[str]] = None) -> int:
    """Executes the command-line interface."""
    args = [const.ARGV0] + (sys.argv[1:] if argv is None else argv)
    return _root.eval(args)
