import re
import json
import inspect
import logging
import dataclasses as dt

from enum import Enum
from pathlib import Path
from typing import Any, Optional, TypeVar, Union
from dataclasses_json import DataClassJsonMixin

_logger = logging.getLogger(__name__)

T = TypeVar("T")
Value = Union[bool, int, str]

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")


# --- Flag Types ------------------------------------------------------------- #


class FlagType(Enum):
    """
    The closed set of value types a flag can carry.
    """

    BOOLEAN = "boolean"
    INT32 = "int32"
    STRING = "string"

    @staticmethod
    def fromName(name: str) -> "FlagType":
        """Resolves a type name or one of its short aliases."""
        if name in _ALIASES:
            return _ALIASES[name]
        raise ValueError(f"Unknown flag type '{name}'")

    @staticmethod
    def fromAnnotation(annotation: Any) -> "FlagType":
        """Maps a Python annotation (`bool`, `int` or `str`) to a flag type."""
        if annotation is bool:
            return FlagType.BOOLEAN
        elif annotation is int:
            return FlagType.INT32
        elif annotation is str:
            return FlagType.STRING
        raise ValueError(f"Unsupported flag annotation '{annotation}'")


_ALIASES = {
    "boolean": FlagType.BOOLEAN,
    "bool": FlagType.BOOLEAN,
    "int32": FlagType.INT32,
    "int": FlagType.INT32,
    "string": FlagType.STRING,
    "str": FlagType.STRING,
}


def arity(typ: FlagType) -> int:
    """Returns how many value tokens a flag of the given type consumes."""
    if typ == FlagType.BOOLEAN:
        return 0
    return 1


def zeroValue(typ: FlagType) -> Value:
    """Returns the value a flag holds when it never appears in the input."""
    if typ == FlagType.BOOLEAN:
        return False
    elif typ == FlagType.INT32:
        return 0
    return ""


def _tryParseInt32(token: str) -> Optional[int]:
    """Tries to parse a signed 32-bit decimal integer, returning None if unsuccessful."""
    if not _INT_RE.fullmatch(token):
        return None
    n = int(token)
    if n < INT32_MIN or n > INT32_MAX:
        return None
    return n


def parseValue(typ: FlagType, token: Optional[str]) -> Optional[Value]:
    """
    Interprets a value token for a flag of the given type.

    Boolean flags take no token and always yield True. Int32 flags need the
    whole token to be a decimal integer in range. String flags take the
    token verbatim.

    Returns:
        The parsed value, or None if the token is not valid for the type.
    """
    if typ == FlagType.BOOLEAN:
        return True
    if token is None:
        return None
    if typ == FlagType.INT32:
        return _tryParseInt32(token)
    return token


# --- Schema ----------------------------------------------------------------- #


@dt.dataclass
class Flag(DataClassJsonMixin):
    """
    A single declared flag.
    """

    name: str
    """Name of the flag, without the leading hyphen."""
    type: FlagType
    """Type of the value the flag carries."""
    description: str = ""
    """Free-form description, shown by the command-line tool."""


@dt.dataclass
class Field:
    """
    Declares a flag on an argument class, see `flag()`.
    """

    name: Optional[str]
    description: str = ""

    _fieldName: Optional[str] = dt.field(init=False, default=None)
    _fieldType: Optional[FlagType] = dt.field(init=False, default=None)

    def bind(self, typ: type, name: str):
        """Binds the field to a specific type and field name."""
        self._fieldName = name
        self._fieldType = FlagType.fromAnnotation(inspect.get_annotations(typ)[name])
        if self.name is None:
            self.name = name

    def toFlag(self) -> Flag:
        assert self.name and self._fieldType
        return Flag(self.name, self._fieldType, self.description)


def flag(name: Optional[str] = None, description: str = "") -> Any:
    """
    Declares a flag on an argument class.

    Args:
        name: The flag name (e.g., "p" for "-p"). Defaults to the attribute name.
        description: A description of the flag.
    """
    return Field(name, description)


@dt.dataclass
class Schema(DataClassJsonMixin):
    """
    The declared set of flags a parse accepts.

    A schema is read-only once built and may be shared between parses.
    """

    flags: list[Flag] = dt.field(default_factory=list)

    def __post_init__(self):
        self._index: dict[str, Flag] = {}
        self._typ: Optional[type] = None
        self._attrs: dict[str, str] = {}

        for f in self.flags:
            if f.name in self._index:
                raise ValueError(f"Flag '{f.name}' is declared more than once")
            if (
                len(f.name) == 0
                or f.name.startswith("-")
                or any(c.isspace() for c in f.name)
            ):
                raise ValueError(f"Invalid flag name '{f.name}'")
            self._index[f.name] = f

    @staticmethod
    def of(types: dict[str, FlagType]) -> "Schema":
        """Builds a schema from a mapping of flag names to types."""
        return Schema([Flag(name, typ) for name, typ in types.items()])

    @staticmethod
    def fromSpec(spec: str) -> "Schema":
        """
        Builds a schema from compact text such as `l:bool,p:int32,d:string`.
        """
        flags: list[Flag] = []
        for entry in spec.split(","):
            entry = entry.strip()
            if len(entry) == 0:
                continue

            if ":" not in entry:
                raise ValueError(f"Expected 'name:type' but got '{entry}'")

            name, typ = entry.split(":", 1)
            flags.append(Flag(name.strip(), FlagType.fromName(typ.strip())))
        return Schema(flags)

    @staticmethod
    def load(path: Path) -> "Schema":
        """
        Loads a schema from a JSON file.

        Raises:
            RuntimeError: If the file is missing or not shaped like a schema.
        """
        if not path.exists():
            raise RuntimeError(f"Could not find schema at '{path}'")

        _logger.debug(f"Loading schema from '{path}'")
        with path.open("r") as f:
            data = json.load(f)

        if not isinstance(data, dict) or not isinstance(data.get("flags"), list):
            raise RuntimeError(f"Schema '{path}' should be an object with a 'flags' list")

        if not all(isinstance(entry, dict) for entry in data["flags"]):
            raise RuntimeError(f"Every flag in schema '{path}' should be an object")

        try:
            return Schema.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise RuntimeError(f"Invalid schema '{path}': {e}")

    @staticmethod
    def extract(typ: type) -> "Schema":
        """Extracts a schema from an argument class declared with `flag()`."""
        flags: list[Flag] = []
        attrs: dict[str, str] = {}

        for klass in [typ] + [b for b in typ.__mro__[1:] if b is not object]:
            for f in inspect.get_annotations(klass).keys():
                if f in attrs.values():
                    continue

                field = getattr(klass, f, None)

                if field is None:
                    raise ValueError(f"Field '{f}' is not defined")

                if not isinstance(field, Field):
                    raise ValueError(f"Field '{f}' is not a Field")

                field.bind(klass, f)
                decl = field.toFlag()
                flags.append(decl)
                attrs[decl.name] = f

        s = Schema(flags)
        s._typ = typ
        s._attrs = attrs
        return s

    def lookup(self, name: str) -> Optional[FlagType]:
        """Returns the type of a declared flag, or None if it is unknown."""
        f = self._index.get(name)
        return f.type if f else None

    def names(self) -> list[str]:
        return [f.name for f in self.flags]

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self.flags)

    def usage(self) -> str:
        """Returns a usage string for the schema."""
        res = ""
        for f in self.flags:
            if f.type == FlagType.BOOLEAN:
                res += f"[-{f.name}] "
            else:
                res += f"[-{f.name} <{f.type.value}>] "
        return res.rstrip()


# --- Result Store ----------------------------------------------------------- #


@dt.dataclass
class ResultStore(DataClassJsonMixin):
    """
    The typed values produced by a successful parse, one mapping per flag type.
    """

    bools: dict[str, bool] = dt.field(default_factory=dict)
    ints: dict[str, int] = dt.field(default_factory=dict)
    strings: dict[str, str] = dt.field(default_factory=dict)

    @staticmethod
    def fromSchema(schema: Schema) -> "ResultStore":
        """Creates a store holding the zero value of every declared flag."""
        store = ResultStore()
        for f in schema.flags:
            store.put(f.name, f.type, zeroValue(f.type))
        return store

    def _mapping(self, typ: FlagType) -> dict[str, Any]:
        if typ == FlagType.BOOLEAN:
            return self.bools
        elif typ == FlagType.INT32:
            return self.ints
        return self.strings

    def put(self, name: str, typ: FlagType, value: Value):
        """Writes a value, replacing whatever the flag held before."""
        self._mapping(typ)[name] = value

    def getBool(self, name: str) -> bool:
        return self.bools.get(name, False)

    def getInt(self, name: str) -> int:
        return self.ints.get(name, 0)

    def getString(self, name: str) -> str:
        return self.strings.get(name, "")

    def get(self, name: str, typ: FlagType) -> Value:
        return self._mapping(typ).get(name, zeroValue(typ))

    def rows(self, schema: Schema) -> list[tuple[str, str, str]]:
        """Returns (name, type, value) rows in schema order."""
        return [
            (f"-{f.name}", f.type.value, repr(self.get(f.name, f.type)))
            for f in schema.flags
        ]

    def into(self, schema: Schema) -> Any:
        """
        Instantiates the argument class a schema was extracted from and
        fills its fields from this store.
        """
        if schema._typ is None:
            raise ValueError("Schema was not extracted from a class")

        res = schema._typ()
        for f in schema.flags:
            setattr(res, schema._attrs[f.name], self.get(f.name, f.type))
        return res


def defaults(typ: type[T]) -> T:
    """Returns an argument object with every flag at its zero value."""
    schema = Schema.extract(typ)
    return ResultStore.fromSchema(schema).into(schema)
