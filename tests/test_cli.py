import sys
import json

import pytest

import flagkit
from flagkit import cli, const, graph
from flagkit.flags import Schema, flag


@pytest.fixture(autouse=True)
def _logFile(tmp_path, monkeypatch):
    monkeypatch.setattr(const, "GLOBAL_LOG_FILE", str(tmp_path / "logs" / "flagkit.log"))


# --- Commands --------------------------------------------------------------- #


class EchoArgs:
    name: str = flag("n", "Name to echo")
    loud: bool = flag("loud")


def _echo(seen: list) -> cli.Command:
    def fn(args: EchoArgs, extra: str):
        seen.append((args.name, args.loud, extra))

    return cli.Command(
        None,
        ["echo"],
        schema=Schema.extract(EchoArgs),
        callable=fn,
        takesExtra=True,
    )


def test_command_invoke():
    seen: list = []
    cmd = _echo(seen)
    assert cmd.eval(["echo", "-n", "foo", "-loud", "--", "a", "b"]) == 0
    assert seen == [("foo", True, "a b")]


def test_command_defaults():
    seen: list = []
    cmd = _echo(seen)
    assert cmd.eval(["echo"]) == 0
    assert seen == [("", False, "")]


def test_command_bad_option(capsys):
    seen: list = []
    cmd = _echo(seen)
    assert cmd.eval(["echo", "-x"]) == 1
    assert seen == []
    assert "Unknown flag '-x'" in capsys.readouterr().err


def test_command_help(capsys):
    seen: list = []
    cmd = _echo(seen)
    assert cmd.eval(["echo", "-h"]) == 0
    assert seen == []
    out = capsys.readouterr().out
    assert "-n" in out
    assert "Name to echo" in out


def test_command_help_after_separator_is_extra():
    seen: list = []
    cmd = _echo(seen)
    assert cmd.eval(["echo", "--", "-h"]) == 0
    assert seen == [("", False, "-h")]


def test_command_unexpected_separator(capsys):
    cmd = cli.Command(None, ["noop"], callable=lambda: None)
    assert cmd.eval(["noop", "--", "a"]) == 1
    assert "Unexpected '--'" in capsys.readouterr().err


def test_command_unexpected_argument(capsys):
    cmd = cli.Command(None, ["noop"], callable=lambda: None)
    assert cmd.eval(["noop", "-a"]) == 1
    assert "Unexpected argument '-a'" in capsys.readouterr().err


def test_command_usage():
    seen: list = []
    cmd = _echo(seen)
    assert cmd.usage() == " [-n <string>] [-loud] [-- args...]"


# --- Tool ------------------------------------------------------------------- #


def test_version(capsys):
    assert cli.exec(["version"]) == 0
    assert const.VERSION_STR in capsys.readouterr().out


def test_unknown_subcommand(capsys):
    assert cli.exec(["nope"]) == 1
    assert "Unknown subcommand 'nope'" in capsys.readouterr().err


def test_parse_cmd(capsys):
    status = cli.exec(
        ["parse", "-schema", "l:bool,p:int32,d:string", "--", "-l", "-p", "1080"]
    )
    assert status == 0
    out = capsys.readouterr().out
    assert "-l" in out
    assert "True" in out
    assert "1080" in out
    assert "''" in out


def test_parse_cmd_json(capsys):
    status = cli.exec(
        ["parse", "-schema", "l:bool,p:int32,d:string", "-json", "--", "-p", "-1080", "-d", "-hola_mundo"]
    )
    assert status == 0
    data = json.loads(capsys.readouterr().out)
    assert data["ints"] == {"p": -1080}
    assert data["strings"] == {"d": "-hola_mundo"}
    assert data["bools"] == {"l": False}


def test_parse_cmd_file(tmp_path, capsys):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps({"flags": [{"name": "p", "type": "int32"}]}))
    status = cli.exec(["parse", "-file", str(path), "-json", "--", "-p", "1080", "-p", "88"])
    assert status == 0
    assert json.loads(capsys.readouterr().out)["ints"] == {"p": 88}


def test_parse_cmd_failure(capsys):
    status = cli.exec(["parse", "-schema", "p:int32", "--", "-p", "abc"])
    assert status == 1
    assert "Bad value 'abc'" in capsys.readouterr().err


def test_parse_cmd_without_schema(capsys):
    assert cli.exec(["parse", "--", "-l"]) == 1
    assert "Expected a schema" in capsys.readouterr().err


def test_main_missing_schema_file(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(
        sys, "argv", ["flagkit", "parse", "-file", str(tmp_path / "nope.json"), "--"]
    )
    assert flagkit.main() == 1
    assert "Could not find schema" in capsys.readouterr().err


def test_main_malformed_schema_file(tmp_path, monkeypatch, capsys):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps({"flags": ["p"]}))
    monkeypatch.setattr(
        sys, "argv", ["flagkit", "parse", "-file", str(path), "--", "-p", "1"]
    )
    assert flagkit.main() == 1
    assert "should be an object" in capsys.readouterr().err


# --- Graph ------------------------------------------------------------------ #


def test_graph_generic():
    source = graph.build().source
    assert "ReadingName" in source
    assert "ReadingValue" in source
    assert "Done" in source
    assert "ParseError" in source


def test_graph_schema():
    source = graph.build(Schema.fromSpec("l:bool,p:int32,d:string")).source
    assert "ReadingValue(p)" in source
    assert "ReadingValue(d)" in source
    assert "ReadingValue(l)" not in source
    assert "-l" in source


def test_graph_cmd(tmp_path):
    output = tmp_path / "machine.gv"
    assert cli.exec(["graph", "-output", str(output)]) == 0
    assert "ReadingName" in output.read_text()
