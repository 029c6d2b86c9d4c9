import logging

from pathlib import Path

from . import cli, const, vt100
from .flags import Schema, flag
from .machine import ParseFailed, parse

_logger = logging.getLogger(__name__)


class ParseArgs:
    schema: str = flag("schema", "Flag schema, e.g. 'l:bool,p:int32,d:string'")
    file: str = flag("file", "Path to a JSON schema file")
    json: bool = flag("json", "Print the result as JSON")


def loadSchema(args: ParseArgs) -> Schema:
    if args.schema and args.file:
        raise ValueError("Expected either -schema or -file, not both")

    if args.file:
        return Schema.load(Path(args.file))

    if args.schema:
        return Schema.fromSpec(args.schema)

    raise ValueError("Expected a schema, use -schema or -file")


@cli.command("p", "parse", "Parse an argument string against a flag schema")
def parseCmd(args: ParseArgs, extra: str) -> int:
    schema = loadSchema(args)
    _logger.info(f"Parsing '{extra}' against {len(schema)} flag(s)")

    try:
        store = parse(schema, extra)
    except ParseFailed as e:
        vt100.error(str(e))
        return 1

    if args.json:
        print(store.to_json(indent=2))
    else:
        print(vt100.table(store.rows(schema)))
    return 0


@cli.command("u", "usage", "Show usage information")
def usageCmd():
    cli.usage()


@cli.command("v", "version", "Show current version")
def versionCmd():
    print(f"flagkit v{const.VERSION_STR}")
