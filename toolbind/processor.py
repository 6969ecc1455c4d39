"""
toolbind argument processor: binds raw command-line tokens onto a tool instance.

Flow (single left-to-right pass, then an ordered end sequence)
1) classify every token:
   • "--"                 → end of options; every later token is positional.
   • "--name[=value]"     → long option; unknown names are kept as rest tokens.
   • "-abc" (not "-")     → bundled short options, walked character by character.
   • anything else        → the next positional slot (the subtool slot comes last).
2) bind: single-valued slots are parsed and applied at once; multivalued slots are parsed at
   once and applied at the end, as one list, in the order the values were given.
3) subtools: a token filling the subtool slot starts a nested processor on the subtool
   model. It shares the same Cursor, so it consumes every remaining token.
4) end sequence, in order: multiplicity checks, deferred multivalued application, rest
   tokens, unrecognized-token fault, post-construction hooks.

Faults
- user input problems raise ToolError subclasses (see faults).
- unrecognized tokens are collected and reported together; everything else fails fast.
- a failing callback (setter, rest acceptor, hook) that is not a user fault is reported as
  ToolInternalError with the cause chained.
"""
import logging
import shlex
import sys

from .faults import (
    ToolError,
    ToolInternalError,
    InvalidValueError,
    OptionWithoutArgumentError,
    UnexpectedArgumentError,
    TooFewValuesError,
    TooManyValuesError,
    UnrecognizedArgumentsError,
)
from .models import ArgumentType
from .parsers import Delegate
from .utils import Unset

logger = logging.getLogger(__name__)

LONG_PREFIX = "--"
SHORT_PREFIX = "-"
LONG_SEPARATOR = "="


class Cursor:
    """
    A token sequence and a read position.

    The same cursor object is passed from a processor to the processors of its subtools, so
    the position moves forward for all of them.
    """
    __slots__ = ("_tokens", "_position")

    def __init__(self, tokens=(), /):
        tokens = tuple(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError(f"tokens must be strings, not {type(token).__name__!r}")
        self._tokens = tokens
        self._position = 0

    @property
    def tokens(self):
        return self._tokens

    @property
    def position(self):
        return self._position

    @property
    def remaining(self):
        return self._tokens[self._position:]

    def __iter__(self):
        return self

    def __next__(self):
        if self._position >= len(self._tokens):
            raise StopIteration
        token = self._tokens[self._position]
        self._position += 1
        return token

    def __bool__(self):
        return self._position < len(self._tokens)

    def __repr__(self):
        return f"Cursor({list(self.remaining)!r})"


class Binding[_T]:
    """
    One value bound to one slot during a run.

    Attributes
    - given: the option name as written ("--out", "-o"), None for positionals.
    - option: the OptionModel, None for positionals.
    - argument: the ArgumentModel of the slot.
    - unparsed: the raw text, None for an absent optional value.
    - value: the parsed value (Unset until parsed).
    """
    __slots__ = ("given", "option", "argument", "unparsed", "value")

    def __init__(self, argument, unparsed, /, given=None, option=None):
        self.given = given
        self.option = option
        self.argument = argument
        self.unparsed = unparsed
        self.value = Unset

    @classmethod
    def aggregate(cls, bindings, /):
        """
        Collapse the bindings of one multivalued slot into a single binding whose value is
        the list of parsed values, in order.
        """
        if not bindings:
            raise ToolInternalError("cannot aggregate an empty list of bindings")
        first = bindings[0]
        for binding in bindings:
            if binding.argument is not first.argument:
                raise ToolInternalError(
                    f"cannot aggregate bindings of {first.argument.name!r} and {binding.argument.name!r}"
                )
        aggregate = cls(first.argument, [binding.unparsed for binding in bindings], given=first.given, option=first.option)
        aggregate.value = [binding.value for binding in bindings]
        return aggregate

    def invalid(self, parser=None, /):
        """
        Build the invalid-value fault for this binding.
        """
        allowed = parser.possibilities if parser is not None and parser.enumerable else ()
        if self.option is not None:
            return InvalidValueError(self.unparsed, option=self.given, allowed=allowed, tool=self.argument.tool)
        return InvalidValueError(self.unparsed, argument=self.argument.name, allowed=allowed, tool=self.argument.tool)

    def __repr__(self):
        return f"Binding({self.given or self.argument.name!r}, {self.unparsed!r}, value={self.value!r})"


class ArgumentProcessor:
    """
    Binds the tokens of a Cursor onto one tool instance according to its ToolModel.

    A processor is good for a single run; process() returns the populated tool.
    """

    def __init__(self, model, tool, cursor, /):
        if not isinstance(cursor, Cursor):
            raise TypeError("ArgumentProcessor() third argument must be a Cursor")
        self._model = model
        self._tool = tool
        self._cursor = cursor
        self._bindings = {}
        self._rest = []
        self._unrecognized = []

    def process(self):
        logger.debug("binding %r from %r", self._model.path or "<top-level>", self._cursor)
        models = self._model.arguments_and_subtool()
        eoo = False
        index = 0
        count = 0

        for token in self._cursor:
            if not eoo and token == LONG_PREFIX:
                logger.debug("end of options")
                eoo = True
            elif not eoo and token.startswith(LONG_PREFIX):
                self._long(token)
            elif not eoo and token.startswith(SHORT_PREFIX) and token != SHORT_PREFIX:
                self._short(token)
            else:
                if index >= len(models):
                    raise UnexpectedArgumentError(token, tool=self._model)
                argument = models[index]
                logger.debug("positional %r -> %s", token, argument.name)
                self._process(Binding(argument, token))
                count += 1
                if count >= argument.multiplicity.max:
                    index += 1
                    count = 0

        self._finish()
        return self._tool

    def _long(self, token):
        name, separator, inline = token[len(LONG_PREFIX):].partition(LONG_SEPARATOR)
        if (option := self._model.option(name)) is None:
            logger.debug("unknown long option %r kept as rest", token)
            self._rest.append(token)
            return
        given = LONG_PREFIX + name
        match option.argtype:
            case ArgumentType.NOT_ALLOWED:
                argument = "true"
            case ArgumentType.OPTIONAL:
                argument = inline if separator else None
            case ArgumentType.REQUIRED:
                if separator:
                    argument = inline
                elif self._cursor:
                    argument = next(self._cursor)
                else:
                    raise OptionWithoutArgumentError(given, tool=self._model)
        logger.debug("option %s -> %r", given, argument)
        self._process(Binding(option.argument, argument, given=given, option=option))

    def _short(self, token):
        for position in range(len(SHORT_PREFIX), len(token)):
            char = token[position]
            if (option := self._model.shortoption(char)) is None:
                offender = token if token == SHORT_PREFIX + char else f"-{char} (in {token})"
                logger.debug("unknown short option %r", offender)
                self._unrecognized.append(offender)
                return
            given = SHORT_PREFIX + char
            attached = token[position + 1:]
            match option.argtype:
                case ArgumentType.NOT_ALLOWED:
                    self._process(Binding(option.argument, "true", given=given, option=option))
                    continue
                case ArgumentType.OPTIONAL:
                    argument = attached or None
                case ArgumentType.REQUIRED:
                    if attached:
                        argument = attached
                    elif self._cursor:
                        argument = next(self._cursor)
                    else:
                        raise OptionWithoutArgumentError(given, tool=self._model)
            logger.debug("option %s -> %r", given, argument)
            self._process(Binding(option.argument, argument, given=given, option=option))
            return

    def _process(self, binding):
        binding.value = self._parse(binding)
        self._bindings.setdefault(binding.argument, []).append(binding)
        if not binding.argument.multivalued:
            self._apply(binding)

    def _parse(self, binding):
        if binding.unparsed is None:
            return None
        parser = binding.argument.parser
        try:
            value = parser.parse(binding.unparsed, self._tool)
        except ToolError:
            raise
        except Exception as exception:
            raise binding.invalid(parser) from exception
        if isinstance(value, Delegate):
            try:
                subtool = value.model.instantiate()
            except Exception as exception:
                raise ToolInternalError(f"factory of subtool {binding.unparsed!r} failed: {exception}") from exception
            logger.debug("delegating %r to subtool %r", list(self._cursor.remaining), binding.unparsed)
            return ArgumentProcessor(value.model, subtool, self._cursor).process()
        return value

    def _apply(self, binding):
        try:
            binding.argument.setter(self._tool, binding.value)
        except ToolError:
            raise
        except ValueError as exception:
            raise binding.invalid() from exception
        except Exception as exception:
            raise ToolInternalError(f"setter of {binding.argument.name!r} failed: {exception}") from exception

    def _check(self, argument, /):
        multiplicity = argument.multiplicity
        count = len(self._bindings.get(argument, ()))
        if multiplicity.contains(count):
            return None
        if argument.option is not None:
            subject = {"option": argument.option.longname}
        else:
            subject = {"argument": argument.name}
        if count < multiplicity.min:
            return TooFewValuesError(multiplicity.min, count, tool=self._model, **subject)
        return TooManyValuesError(multiplicity.max, count, tool=self._model, **subject)

    def _finish(self):
        slots = [option.argument for option in self._model.options.values()]
        slots += self._model.arguments_and_subtool()
        for argument in slots:
            if (fault := self._check(argument)) is not None:
                raise fault

        for argument, bindings in self._bindings.items():
            if argument.multivalued:
                self._apply(Binding.aggregate(bindings))

        if self._rest:
            if (acceptor := self._model.rest) is not None:
                self._callback(acceptor, "rest acceptor", self._tool, list(self._rest))
            else:
                self._unrecognized.extend(self._rest)

        if self._unrecognized:
            raise UnrecognizedArgumentsError(self._unrecognized, tool=self._model)

        for hook in self._model.hooks:
            self._callback(hook, "post-construction hook", self._tool)
        logger.debug("bound %r", self._model.path or "<top-level>")

    def _callback(self, callback, what, /, *arguments):
        try:
            callback(*arguments)
        except ToolError:
            raise
        except Exception as exception:
            raise ToolInternalError(f"{what} {getattr(callback, "__name__", callback)!r} failed: {exception}") from exception


def bind(model, tokens=Unset, /, tool=Unset):
    """
    Populate a tool from command-line tokens.

    Parameters
    - model: ToolModel
    - tokens: Iterable[str] | str | Unset
      tokens to bind; a string is split like a shell would (shlex.split); Unset reads
      sys.argv[1:].
    - tool: object | Unset
      instance to populate; a fresh one is created from the model factory when Unset.

    Returns
    - the populated tool.

    Raises
    - ToolError subclasses for invalid input, ToolInternalError for model or callback bugs.
    """
    if tokens is Unset:
        tokens = sys.argv[1:]
    elif isinstance(tokens, str):
        tokens = shlex.split(tokens)
    if tool is Unset:
        tool = model.instantiate()
    return ArgumentProcessor(model, tool, Cursor(tokens)).process()


__all__ = (
    "Cursor",
    "Binding",
    "ArgumentProcessor",
    "bind",
)
