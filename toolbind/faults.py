"""
toolbind faults (user errors, internal errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing fault, grouped by domain.
- ToolError: base type for faults caused by user input (command-line tokens, config keys,
  config files). Carries a message plus immutable options and renders itself with rich.
- ToolInternalError: faults caused by a broken tool model or a failing callback. These are
  programming errors; the original cause is always chained.
- trigger(): surface a fault with runtime options (raise it, or print it and exit in shell
  mode).

Taxonomy
- MalformedKeyError                 config key with fewer than two dotted components.
- ConfigFileError                   config text that cannot be read.
- OptionArgumentError               command-line binding faults:
  • InvalidValueError               a token the slot parser (or setter) rejected.
  • OptionWithoutArgumentError      a required option value is missing.
  • UnexpectedArgumentError         a positional token with no slot left to fill.
  • TooFewValuesError / TooManyValuesError
                                    a slot bound outside its multiplicity.
  • UnrecognizedArgumentsError      unknown options and rest tokens, reported together.

Rendering options
- tool: ToolModel used for the program name in the header (falls back to "toolbind").
- shell: print and exit instead of raising (default False).
- fancy: render inside a rich Panel (default False).
- colorful: apply styles (default True).
- title / code / hint: override the class defaults.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce, conjoin, pluralize

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - configuration (2110x)
      • MALFORMED_KEY, MALFORMED_CONFIG
    - option/argument binding (2111x/2112x)
      • INVALID_OPTION_VALUE, INVALID_ARGUMENT_VALUE, OPTION_WITHOUT_ARGUMENT,
        UNEXPECTED_ARGUMENT, TOO_FEW_VALUES, TOO_MANY_VALUES, UNRECOGNIZED_ARGUMENTS
    - internal (2190x)
      • INTERNAL_ERROR
    """
    # --- configuration (21xxx) ---
    MALFORMED_KEY               = 21101
    MALFORMED_CONFIG            = 21102

    # --- option/argument binding (21xxx) ---
    INVALID_OPTION_VALUE        = 21111
    INVALID_ARGUMENT_VALUE      = 21112
    OPTION_WITHOUT_ARGUMENT     = 21113
    UNEXPECTED_ARGUMENT         = 21121
    TOO_FEW_VALUES              = 21122
    TOO_MANY_VALUES             = 21123
    UNRECOGNIZED_ARGUMENTS      = 21141

    # --- internal (21xxx) ---
    INTERNAL_ERROR              = 21901

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to override numeric
        ids with friendlier labels. without one, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ToolError(Exception):
    """
    Base type for user-facing faults.

    Subclasses set __code__, __title__ and __hint__ as defaults; any of them can be
    overridden per instance through the "code", "title" and "hint" options.
    """
    __code__ = FaultCode.INTERNAL_ERROR
    __title__ = "tool error"
    __hint__ = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def hint(self):
        return self.options.get("hint", type(self).__hint__)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        if (tool := self.options.get("tool")) is not None:
            name = tool.root.name or "toolbind"
        else:
            name = "toolbind"
        prog = text(getattr(main, "__prog__", name), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if self.hint:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))

        if fancy:
            width = console.width - 4
            try:
                width = int(width * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(*renders), title=header, title_align="left", width=width)

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replaced = type(self).__new__(type(self))
        ToolError.__init__(replaced, self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class MalformedKeyError(ToolError, ValueError):
    __code__ = FaultCode.MALFORMED_KEY
    __title__ = "malformed key"
    __hint__ = "keys look like section.option or section.subsection.option"

    def __init__(self, key, /, **options):
        super().__init__(f"invalid configuration key {key!r}", key=key, **options)


class ConfigFileError(ToolError):
    __code__ = FaultCode.MALFORMED_CONFIG
    __title__ = "malformed config"

    def __init__(self, reason, /, line=Unset, source=Unset, **options):
        location = ""
        if source is not Unset:
            location += str(source)
        if line is not Unset:
            location += f"{":" if location else "line "}{line}"
        super().__init__(
            f"{location}: {reason}" if location else reason,
            reason=reason,
            line=coalesce(line),
            source=coalesce(source),
            **options
        )


class OptionArgumentError(ToolError):
    """
    Base type for faults raised while binding command-line tokens.

    Post-construction hooks raise this (or a subclass) to report a user error about a
    combination of options; anything else they raise is reported as internal.
    """
    __code__ = FaultCode.INVALID_OPTION_VALUE
    __title__ = "invalid arguments"


class InvalidValueError(OptionArgumentError):
    """
    A token was rejected by the parser (or setter) of the slot it was bound to.

    Options
    - option: the option name as given on the command line (None for positionals).
    - argument: the positional argument name (None for options).
    - value: the offending raw text.
    - allowed: sorted valid spellings when the parser enumerates them, else ().
    """
    __title__ = "invalid value"

    def __init__(self, value, /, option=None, argument=None, allowed=(), **options):
        allowed = tuple(sorted(allowed))
        if option is not None:
            subject = f"option '{option}'"
            options.setdefault("code", FaultCode.INVALID_OPTION_VALUE)
        else:
            subject = f"argument '{argument}'"
            options.setdefault("code", FaultCode.INVALID_ARGUMENT_VALUE)
        message = f"invalid value {value!r} for {subject}"
        if allowed:
            options.setdefault("hint", f"allowed values are {conjoin(allowed)}")
        super().__init__(message, value=value, option=option, argument=argument, allowed=allowed, **options)


class OptionWithoutArgumentError(OptionArgumentError):
    __code__ = FaultCode.OPTION_WITHOUT_ARGUMENT
    __title__ = "missing option value"
    __hint__ = "pass the value as --option=value or as the next token"

    def __init__(self, option, /, **options):
        super().__init__(f"option '{option}' requires a value", option=option, **options)


class UnexpectedArgumentError(OptionArgumentError):
    __code__ = FaultCode.UNEXPECTED_ARGUMENT
    __title__ = "unexpected argument"

    def __init__(self, value, /, **options):
        super().__init__(f"unexpected argument {value!r}", value=value, **options)


class MultiplicityError(OptionArgumentError):
    """
    A slot was bound a number of times outside its multiplicity.

    Options
    - option / argument: the slot (option long name, or positional name).
    - bound: the violated bound.
    - count: how many values were bound.
    """
    __direction__ = ""

    def __init__(self, bound, count, option=None, argument=None, **options):
        if option is not None:
            subject = f"option '--{option}'"
            noun = "time"
        else:
            subject = f"argument '{argument}'"
            noun = "value"
        message = (
            f"{subject} expects {type(self).__direction__} {bound} {pluralize(noun, bound)}"
            f" but got {count}"
        )
        super().__init__(message, bound=bound, count=count, option=option, argument=argument, **options)


class TooFewValuesError(MultiplicityError):
    __code__ = FaultCode.TOO_FEW_VALUES
    __title__ = "too few values"
    __direction__ = "at least"


class TooManyValuesError(MultiplicityError):
    __code__ = FaultCode.TOO_MANY_VALUES
    __title__ = "too many values"
    __direction__ = "at most"


class UnrecognizedArgumentsError(OptionArgumentError):
    __code__ = FaultCode.UNRECOGNIZED_ARGUMENTS
    __title__ = "unrecognized arguments"
    __hint__ = "use '--' to pass the remaining tokens as positional arguments"

    def __init__(self, offenders, /, **options):
        offenders = tuple(offenders)
        super().__init__(f"unrecognized arguments: {", ".join(offenders)}", offenders=offenders, **options)


class ToolInternalError(Exception):
    """
    A fault of the tool model or of its callbacks, never of the user input.

    Always raised with the original exception chained (``raise ... from cause``).
    """
    __code__ = FaultCode.INTERNAL_ERROR


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ToolError).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode the fault is printed to stderr with rich and the process exits with 1;
      otherwise the merged fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "ToolError",
    "MalformedKeyError",
    "ConfigFileError",
    "OptionArgumentError",
    "InvalidValueError",
    "OptionWithoutArgumentError",
    "UnexpectedArgumentError",
    "MultiplicityError",
    "TooFewValuesError",
    "TooManyValuesError",
    "UnrecognizedArgumentsError",
    "ToolInternalError",
    "trigger",
)
