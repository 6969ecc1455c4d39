"""
toolbind tool models (declarative descriptions of what a tool accepts).

Overview
- ArgumentType: whether an option takes a value (NOT_ALLOWED, OPTIONAL, REQUIRED).
- ArgumentModel[_T]: one value slot (a positional argument, or the value of an option):
  name, parser, multiplicity and setter.
- OptionModel[_T]: a named option (--long / -s) wrapping its ArgumentModel.
- SubtoolModel: the trailing slot naming a nested tool, resolved through a loader.
- ToolModel: everything a tool accepts plus the factory producing fresh instances.

Building
- Models are assembled with the builder methods of ToolModel (add_option, add_argument,
  set_rest, set_subtool, add_hook). Parsers are selected from the declared value type when
  a slot is created, never while binding.
- Setters are plain callables taking (tool, value). A string setter names the attribute to
  assign; by default the slot name is used, with '-' replaced by '_'.
- After building, a model is a read-only template: every public attribute is a mirror() of
  the backing storage and returns copies of containers.

Example
    >>> model = ToolModel("compile")
    >>> model.add_option("verbose", "v", type=bool)
    >>> model.add_option("out", "o", type=pathlib.Path)
    >>> model.add_argument("modules", multiplicity="+")
"""
import enum
import re
import types

from .multiplicity import Multiplicity, ONE, ZERO_OR_ONE
from .parsers import ArgumentParser, forclass, fortool
from .utils import Unset, Introspectable, coalesce, rename


class ArgumentType(enum.Enum):
    """
    How an option relates to a value.

    - NOT_ALLOWED: a flag; binds the implicit value "true" and never consumes a token.
    - OPTIONAL: takes a value only in attached form (--name=value, -nvalue).
    - REQUIRED: takes an attached value, or else the next token.
    """
    NOT_ALLOWED = "not-allowed"
    OPTIONAL = "optional"
    REQUIRED = "required"


def _multiplicity(multiplicity, /):
    if isinstance(multiplicity, Multiplicity):
        return multiplicity
    return Multiplicity.fromnargs(multiplicity)


def _setter(setter, name, /):
    if callable(setter):
        return setter
    attribute = coalesce(setter, name.replace("-", "_"))
    if not isinstance(attribute, str) or not attribute.isidentifier():
        raise TypeError(f"setter must be callable or an attribute name, not {attribute!r}")

    @rename(f"set_{attribute}")
    def setter(tool, value):
        setattr(tool, attribute, value)

    return setter


def _parser(type, parser, /, loader=None):
    if parser is not Unset:
        if not isinstance(parser, ArgumentParser):
            raise TypeError("parser must be an ArgumentParser")
        return parser
    if (parser := forclass(type, loader=loader)) is None:
        raise TypeError(f"no argument parser for {type!r}")
    return parser


class ArgumentModel[_T](metaclass=Introspectable):
    """
    A value slot of a tool: a positional argument or the value of an option.

    Parameters
    - name: str
      positional name (used in faults); options use their long name.
    - type: type
      value type; selects the parser (see parsers.forclass). Ignored when `parser` is given.
    - multiplicity: Multiplicity | "?" | "*" | "+" | int
      how many values the slot accepts.
    - setter: Callable[[tool, value], None] | str
      applies the parsed value (a list of values for multivalued slots).
    - parser: ArgumentParser
      explicit parser, overriding `type`.

    Back-references
    - option: the owning OptionModel, None for positionals.
    - tool: the owning ToolModel, None until the slot is added to one.
    """
    __introspectable__ = (
        "name",
        "parser",
        "multiplicity",
        "setter",
        "option",
        "tool",
    )
    __displayable__ = (
        "name",
        "parser",
        "multiplicity",
    )

    def __init__(self, name, /, type=str, multiplicity=ONE, setter=Unset, parser=Unset):
        if not isinstance(name, str):
            raise TypeError("argument name must be a string")
        if not (name := name.strip()):
            raise ValueError("argument name must be a non-empty string")
        self._name = name
        self._parser = _parser(type, parser)
        self._multiplicity = _multiplicity(multiplicity)
        self._setter = _setter(setter, name)
        self._option = None
        self._tool = None

    @property
    def multivalued(self):
        return self._multiplicity.multivalued


class SubtoolModel(ArgumentModel):
    """
    The slot naming a nested tool.

    The token filling it is resolved through `loader` (a mapping of names to tool models,
    or a callable returning a tool model or None); the resolved subtool is then populated
    from the tokens that follow.
    """
    __introspectable__ = ArgumentModel.__introspectable__ + ("loader",)

    def __init__(self, loader, /, name="subtool", multiplicity=ONE, setter=Unset):
        super().__init__(name, multiplicity=multiplicity, setter=setter, parser=fortool(loader))
        self._loader = loader


class OptionModel[_T](metaclass=Introspectable):
    """
    A named option of a tool.

    Parameters
    - longname: str
      name used as --longname; unique within the tool.
    - shortname: str | None
      single character used as -c; unique within the tool.
    - type: type
      value type (see ArgumentModel); bool options default to NOT_ALLOWED.
    - argtype: ArgumentType
      defaults to NOT_ALLOWED for bool options, REQUIRED otherwise.
    - multiplicity / setter / parser: as for ArgumentModel; multiplicity defaults to [0..1].
    """
    __introspectable__ = (
        "longname",
        "shortname",
        "argtype",
        "argument",
        "tool",
    )
    __displayable__ = (
        "longname",
        "shortname",
        "argtype",
        "argument",
    )

    def __init__(
            self,
            longname,
            shortname=None,
            /,
            type=str,
            argtype=Unset,
            multiplicity=ZERO_OR_ONE,
            setter=Unset,
            parser=Unset
    ):
        if not isinstance(longname, str):
            raise TypeError("option long name must be a string")
        if not re.fullmatch(r"[^\W_][\w.-]*", longname):
            raise ValueError(f"invalid option long name {longname!r}")
        if shortname is not None:
            if not isinstance(shortname, str):
                raise TypeError("option short name must be a string")
            if len(shortname) != 1 or shortname in "-=" or shortname.isspace():
                raise ValueError(f"invalid option short name {shortname!r}")
        if argtype is Unset:
            argtype = ArgumentType.NOT_ALLOWED if type is bool else ArgumentType.REQUIRED
        elif not isinstance(argtype, ArgumentType):
            raise TypeError("argtype must be an ArgumentType")

        self._longname = longname
        self._shortname = shortname
        self._argtype = argtype
        self._argument = ArgumentModel(longname, type=type, multiplicity=multiplicity, setter=setter, parser=parser)
        self._argument._option = self
        self._tool = None


class ToolModel(metaclass=Introspectable):
    """
    Everything a tool accepts, plus how to create it.

    Parameters
    - name: str
      "" for the top-level tool, the subtool name otherwise.
    - factory: Callable[[], tool]
      produces a fresh, unpopulated tool instance (types.SimpleNamespace by default).
    - parent: ToolModel | None
      the tool this one is a subtool of.

    Contents (read-only views)
    - options: long name → OptionModel, in declaration order.
    - shortoptions: short character → OptionModel.
    - arguments: positional ArgumentModels, in declaration order.
    - rest: Callable[[tool, list[str]], None] | None, receives unrecognized long options.
    - subtool: SubtoolModel | None, always the last positional slot.
    - hooks: Callable[[tool], None] list, run after a successful binding.

    Build-time rules (ValueError)
    - duplicate long or short option names.
    - a positional, or the subtool, declared after a positional whose multiplicity is a
      range (it would never receive a token).
    - a positional declared after the subtool, or a second subtool.
    """
    __introspectable__ = (
        "name",
        "factory",
        "options",
        "shortoptions",
        "arguments",
        "rest",
        "subtool",
        "hooks",
        "parent",
    )
    __displayable__ = (
        "name",
        "options",
        "arguments",
        "subtool",
    )

    def __init__(self, name="", factory=types.SimpleNamespace, /, parent=None):
        if not isinstance(name, str):
            raise TypeError("tool name must be a string")
        if not callable(factory):
            raise TypeError("tool factory must be callable")
        if parent is not None and not isinstance(parent, ToolModel):
            raise TypeError("tool parent must be a ToolModel")
        self._name = name.strip()
        self._factory = factory
        self._options = {}
        self._shortoptions = {}
        self._arguments = []
        self._rest = None
        self._subtool = None
        self._hooks = []
        self._parent = parent

    @property
    def istoplevel(self):
        return not self._name

    @property
    def root(self):
        tool = self
        while tool._parent is not None:
            tool = tool._parent
        return tool

    @property
    def path(self):
        """
        Names from the root tool down to this one, top-level name excluded when empty.
        """
        tool, names = self, []
        while tool is not None:
            if tool._name:
                names.append(tool._name)
            tool = tool._parent
        return names[::-1]

    def option(self, longname, /):
        return self._options.get(longname)

    def shortoption(self, shortname, /):
        return self._shortoptions.get(shortname)

    def arguments_and_subtool(self):
        if self._subtool is None:
            return list(self._arguments)
        return [*self._arguments, self._subtool]

    def instantiate(self):
        return self._factory()

    def add_option(self, longname, shortname=None, /, **options):
        """
        Declare an option (see OptionModel for parameters) and return its model.

        An OptionModel instance may be passed instead of names.
        """
        if isinstance(longname, OptionModel):
            if shortname is not None or options:
                raise TypeError("add_option() takes no extra arguments with an option model")
            option = longname
        else:
            option = OptionModel(longname, shortname, **options)
        if option._tool is not None:
            raise ValueError(f"option '--{option.longname}' already belongs to a tool")
        if option.longname in self._options:
            raise ValueError(f"duplicate option '--{option.longname}'")
        if option.shortname is not None and option.shortname in self._shortoptions:
            raise ValueError(f"duplicate option '-{option.shortname}'")

        option._tool = self
        option._argument._tool = self
        self._options[option.longname] = option
        if option.shortname is not None:
            self._shortoptions[option.shortname] = option
        return option

    def _check_positional(self, what, /):
        if self._subtool is not None:
            raise ValueError(f"{what} cannot follow the subtool")
        if self._arguments and self._arguments[-1].multiplicity.range:
            raise ValueError(f"{what} after variable-multiplicity arguments are not supported")

    def add_argument(self, name, /, **options):
        """
        Declare the next positional argument (see ArgumentModel) and return its model.
        """
        if isinstance(name, SubtoolModel):
            raise ValueError("use set_subtool() to declare a subtool")
        if isinstance(name, ArgumentModel):
            if options:
                raise TypeError("add_argument() takes no extra arguments with an argument model")
            argument = name
        else:
            argument = ArgumentModel(name, **options)
        if argument._tool is not None or argument._option is not None:
            raise ValueError(f"argument {argument.name!r} already belongs to a tool")
        self._check_positional("arguments")

        argument._tool = self
        self._arguments.append(argument)
        return argument

    def set_subtool(self, loader, /, **options):
        """
        Declare the trailing subtool slot and return its model.

        `loader` is a mapping of names to tool models, a callable returning a tool model or
        None, or a ready SubtoolModel.
        """
        if self._subtool is not None:
            raise ValueError("a tool accepts only one subtool")
        self._check_positional("a subtool")
        if isinstance(loader, SubtoolModel):
            if options:
                raise TypeError("set_subtool() takes no extra arguments with a subtool model")
            subtool = loader
        else:
            subtool = SubtoolModel(loader, **options)

        subtool._tool = self
        self._subtool = subtool
        return subtool

    def set_rest(self, acceptor, /):
        if not callable(acceptor):
            raise TypeError("set_rest() argument must be callable")
        self._rest = acceptor
        return acceptor

    def add_hook(self, hook, /):
        """
        Register a post-construction hook; usable as a decorator.
        """
        if not callable(hook):
            raise TypeError("add_hook() argument must be callable")
        self._hooks.append(hook)
        return hook


__all__ = (
    "ArgumentType",
    "ArgumentModel",
    "SubtoolModel",
    "OptionModel",
    "ToolModel",
)
