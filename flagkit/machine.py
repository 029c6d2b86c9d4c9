import logging
import dataclasses as dt

from enum import Enum
from typing import Optional, Union

from .flags import FlagType, ResultStore, Schema, T, arity, parseValue
from .tokenizer import Tokenizer

_logger = logging.getLogger(__name__)


class Reason(Enum):
    """
    Why a parse failed.
    """

    MALFORMED_FLAG = "malformed flag"
    UNKNOWN_FLAG = "unknown flag"
    MISSING_VALUE = "missing value"
    BAD_VALUE = "bad value"


class ParseFailed(ValueError):
    """
    Raised when an argument string does not match its schema.

    No partial result accompanies the failure.
    """

    reason: Reason
    token: Optional[str]

    def __init__(self, reason: Reason, token: Optional[str] = None):
        self.reason = reason
        self.token = token
        if token is None:
            super().__init__(reason.value.capitalize())
        else:
            super().__init__(f"{reason.value.capitalize()} '{token}'")


# --- States ----------------------------------------------------------------- #


@dt.dataclass(frozen=True)
class ReadingName:
    """Expecting a flag name token, or the end of the stream."""

    pass


@dt.dataclass(frozen=True)
class ReadingValue:
    """Expecting the value token of a value-bearing flag."""

    name: str
    type: FlagType


@dt.dataclass(frozen=True)
class Done:
    """The stream was consumed cleanly."""

    pass


@dt.dataclass(frozen=True)
class ParseError:
    """The stream did not match the schema. Absorbing."""

    reason: Reason
    token: Optional[str] = None


State = Union[ReadingName, ReadingValue, Done, ParseError]


def isTerminal(state: State) -> bool:
    return isinstance(state, (Done, ParseError))


# --- Machine ---------------------------------------------------------------- #


class Machine:
    """
    Walks a token stream against a schema, one transition at a time.

    A machine owns its tokenizer and its result store and is good for a
    single parse.
    """

    _schema: Schema
    _tokens: Tokenizer
    store: ResultStore

    def __init__(self, schema: Schema, src: str):
        self._schema = schema
        self._tokens = Tokenizer(src)
        self.store = ResultStore.fromSchema(schema)

    def _readName(self) -> State:
        tok = self._tokens.next()
        if tok is None:
            return Done()

        if len(tok) <= 1:
            return ParseError(Reason.MALFORMED_FLAG, tok)

        if tok[0] != "-":
            return ParseError(Reason.MALFORMED_FLAG, tok)

        name = tok[1:]
        typ = self._schema.lookup(name)
        if typ is None:
            return ParseError(Reason.UNKNOWN_FLAG, tok)

        if arity(typ) == 0:
            value = parseValue(typ, None)
            assert value is not None
            self.store.put(name, typ, value)
            return ReadingName()

        return ReadingValue(name, typ)

    def _readValue(self, state: ReadingValue) -> State:
        tok = self._tokens.next()
        if tok is None:
            return ParseError(Reason.MISSING_VALUE, f"-{state.name}")

        value = parseValue(state.type, tok)
        if value is None:
            return ParseError(Reason.BAD_VALUE, tok)

        self.store.put(state.name, state.type, value)
        return ReadingName()

    def step(self, state: State) -> State:
        """Applies one transition. Terminal states map to themselves."""
        if isinstance(state, ReadingName):
            res = self._readName()
        elif isinstance(state, ReadingValue):
            res = self._readValue(state)
        else:
            return state

        _logger.debug(f"{state} -> {res}")
        return res

    def run(self) -> State:
        """Steps from `ReadingName` until a terminal state is reached."""
        state: State = ReadingName()
        while not isTerminal(state):
            state = self.step(state)
        return state


def parse(schema: Schema, src: str) -> ResultStore:
    """
    Parses an argument string against a schema.

    Args:
        schema: The declared flags.
        src: Whitespace-separated tokens such as `-l -p 1080 -d /srv`.

    Returns:
        A store holding every declared flag, at its zero value unless it
        appeared in `src`, in which case the last occurrence wins.

    Raises:
        ParseFailed: If `src` does not match `schema`.
    """
    machine = Machine(schema, src)
    state = machine.run()
    if isinstance(state, ParseError):
        _logger.info(f"Parse failed: {state.reason.value} ({state.token})")
        raise ParseFailed(state.reason, state.token)
    return machine.store


def tryParse(schema: Schema, src: str) -> Optional[ResultStore]:
    """Like `parse()` but returns None on failure."""
    try:
        return parse(schema, src)
    except ParseFailed:
        return None


def parseInto(typ: type[T], src: str) -> T:
    """Parses an argument string into an instance of an argument class."""
    schema = Schema.extract(typ)
    return parse(schema, src).into(schema)
