"""
Argument parsers: turn one raw token into a typed value.

The set of parser kinds is closed (see ParserKind). The parser of every argument slot is
chosen once, when the tool model is built, by forclass(); binding only ever calls parse().

Built-ins
- STRING       identity.
- INTEGER      optionally signed decimal integer; anything else raises ValueError.
- BOOLEAN      "1", "yes", "true" are True, everything else is False (never fails).
- ENUM         member lookup by name after replacing '-' with '_'; the member names are the
               parser possibilities, listed in invalid-value faults.
- CONSTRUCTOR  the class itself called with the token (pathlib.Path, user value types).
- TOOL         resolves a subtool name through a loader and returns a Delegate holding the
               subtool model; the processor instantiates and populates it.
"""
import enum
import re
from collections import namedtuple
from collections.abc import Mapping

from .utils import rename


class ParserKind(enum.Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    CONSTRUCTOR = "constructor"
    TOOL = "tool"


Delegate = namedtuple("Delegate", ("model",))
Delegate.__doc__ = """
A subtool model resolved by a TOOL parser, still waiting to be instantiated and populated
from the remaining tokens.
"""


class ArgumentParser:
    """
    A parse function tagged with its kind.

    Parameters
    - kind: ParserKind
    - function: Callable[[str, tool], value]
      called with the raw token and the tool being populated.
    - possibilities: Iterable[str]
      the finite set of valid spellings, for enumerated parsers.
    """
    __slots__ = ("_kind", "_function", "_possibilities")

    def __init__(self, kind, function, /, possibilities=()):
        if not isinstance(kind, ParserKind):
            raise TypeError("ArgumentParser() first argument must be a parser kind")
        if not callable(function):
            raise TypeError("ArgumentParser() second argument must be callable")
        self._kind = kind
        self._function = function
        self._possibilities = tuple(possibilities)

    @property
    def kind(self):
        return self._kind

    @property
    def possibilities(self):
        return self._possibilities

    @property
    def enumerable(self):
        return bool(self._possibilities)

    def parse(self, argument, tool=None, /):
        return self._function(argument, tool)

    def __repr__(self):
        return f"ArgumentParser({self._kind.value}, {getattr(self._function, "__name__", self._function)})"


@rename("string")
def _string(argument, tool):
    return argument


@rename("integer")
def _integer(argument, tool):
    if not re.fullmatch(r"[+-]?\d+", argument):
        raise ValueError(f"invalid integer {argument!r}")
    return int(argument)


@rename("boolean")
def _boolean(argument, tool):
    return re.fullmatch(r"1|yes|true", argument) is not None


STRING = ArgumentParser(ParserKind.STRING, _string)
INTEGER = ArgumentParser(ParserKind.INTEGER, _integer)
BOOLEAN = ArgumentParser(ParserKind.BOOLEAN, _boolean)


def forenum(cls, /):
    """
    Build an ENUM parser for an enum.Enum subclass.
    """
    if not (isinstance(cls, type) and issubclass(cls, enum.Enum)):
        raise TypeError("forenum() argument must be an enum class")

    @rename(cls.__name__.lower())
    def parse(argument, tool):
        try:
            return cls[argument.replace("-", "_")]
        except KeyError:
            raise ValueError(f"no {cls.__name__} named {argument!r}") from None

    return ArgumentParser(ParserKind.ENUM, parse, possibilities=[member.name for member in cls])


def forconstructor(cls, /):
    """
    Build a CONSTRUCTOR parser calling `cls` with the raw token.
    """
    if not callable(cls):
        raise TypeError("forconstructor() argument must be callable")

    @rename(getattr(cls, "__name__", "constructor"))
    def parse(argument, tool):
        return cls(argument)

    return ArgumentParser(ParserKind.CONSTRUCTOR, parse)


def resolve(loader, name, /):
    """
    Look a subtool model up by name through a loader (mapping or callable).
    """
    if isinstance(loader, Mapping):
        return loader.get(name)
    return loader(name)


def fortool(loader, /):
    """
    Build a TOOL parser resolving subtool names through `loader`.
    """
    if not (isinstance(loader, Mapping) or callable(loader)):
        raise TypeError("fortool() argument must be a mapping or a callable")

    @rename("subtool")
    def parse(argument, tool):
        if (model := resolve(loader, argument)) is None:
            raise ValueError(f"unknown subtool {argument!r}")
        return Delegate(model)

    if isinstance(loader, Mapping):
        possibilities = list(loader.keys())
    else:
        possibilities = ()
    return ArgumentParser(ParserKind.TOOL, parse, possibilities=possibilities)


def forclass(cls, /, loader=None):
    """
    Select the parser for a value type.

    Dispatch (in order)
    - enum.Enum      → forenum(cls) (before str/int, for StrEnum and IntEnum)
    - str            → STRING
    - bool           → BOOLEAN (before int, bool being an int subclass)
    - int            → INTEGER
    - ToolModel      → fortool(loader), when a loader is given
    - any other type → forconstructor(cls)

    Returns None for values that are not classes, and for ToolModel without a loader.
    """
    from .models import ToolModel

    if not isinstance(cls, type):
        return None
    if issubclass(cls, enum.Enum):
        return forenum(cls)
    if issubclass(cls, str):
        return STRING
    if issubclass(cls, bool):
        return BOOLEAN
    if issubclass(cls, int):
        return INTEGER
    if issubclass(cls, ToolModel):
        return fortool(loader) if loader is not None else None
    return forconstructor(cls)


__all__ = (
    "ParserKind",
    "ArgumentParser",
    "Delegate",
    "STRING",
    "INTEGER",
    "BOOLEAN",
    "forenum",
    "forconstructor",
    "fortool",
    "forclass",
    "resolve",
)
