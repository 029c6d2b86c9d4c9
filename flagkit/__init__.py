import os
import logging

from . import (
    cli,
    cmds,  # noqa: F401 this is imported for side effects
    const,
    graph,  # noqa: F401 this is imported for side effects
    vt100,
)
from .flags import FlagType, ResultStore, Schema, defaults, flag
from .machine import ParseFailed, Reason, parse, parseInto, tryParse
from .tokenizer import Tokenizer, tokenize

__all__ = [
    "FlagType",
    "ParseFailed",
    "Reason",
    "ResultStore",
    "Schema",
    "Tokenizer",
    "defaults",
    "flag",
    "main",
    "parse",
    "parseInto",
    "tokenize",
    "tryParse",
]


class logger:
    class LoggerArgs:
        verbose: bool = flag("verbose", "Enable verbose logging")

    @staticmethod
    def setup(args: LoggerArgs):
        if args.verbose:
            logging.basicConfig(
                level=logging.DEBUG,
                format=f"{vt100.CYAN}%(asctime)s{vt100.RESET} {vt100.YELLOW}%(levelname)s{vt100.RESET} %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        else:
            logFile = const.GLOBAL_LOG_FILE
            os.makedirs(os.path.dirname(logFile), exist_ok=True)

            logging.basicConfig(
                level=logging.INFO,
                filename=logFile,
                filemode="w",
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )


class RootArgs(logger.LoggerArgs):
    pass


@cli.command(None, "/", const.DESCRIPTION)
def _(args: RootArgs):
    logger.setup(args)


def main() -> int:
    try:
        return cli.exec()

    except RuntimeError as e:
        logging.exception(e)
        vt100.error(str(e))
        cli.usage()
        return 1

    except KeyboardInterrupt:
        print()
        return 1
