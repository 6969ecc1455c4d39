"""
toolbind utilities (shared building blocks)

Overview
- UnsetType / Unset
  • sentinel for "argument not given", distinct from None (None is a real value for
    optional option arguments and for config lookups).

- coalesce(value, default=None)
  • swap Unset for a default while keeping None, 0, "" and [] untouched.

- rename(callable, name) / @rename("name")
  • give generated setters and accessors readable names in tracebacks.

- mirror("attr")
  • read-only property over self._attr; containers come back as fresh copies.

- pluralize(word, count) / conjoin(items)
  • small wording helpers for fault messages ("2 values", "a, b or c").

- Introspectable
  • metaclass for model classes: read-only properties for __introspectable__ names,
    plus stable __repr__/__rich_repr__ driven by __displayable__.
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for values that were not provided.

    Characteristics
    - falsey, but never equal to None.
    - repr is "Unset".
    - one instance per process; the type cannot be subclassed.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, otherwise `object` unchanged.

    Examples
    - coalesce("utf-8", "ascii") -> "utf-8"
    - coalesce(Unset, "ascii")   -> "ascii"
    - coalesce(None, "ascii")    -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator that does.

    Forms
    - rename(callable, name) -> callable
    - rename(name)           -> decorator

    Errors
    - TypeError for a non-callable target, a non-string name, a callable whose names
      cannot be updated, or a wrong number of arguments.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    # Copies containers so callers cannot reach the backing storage.
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Define a read-only property reading the backing attribute "_{name}".

    Containers (sequences other than str, mappings, sets) are copied on every access,
    so mutating the returned value never changes the owner.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def pluralize(word, count, /):
    """
    Return `word` when `count` is one, otherwise its plural.

    Only the regular English forms used by fault messages are covered:
    "value" -> "values", "time" -> "times", "entry" -> "entries".
    """
    if not isinstance(word, str):
        raise TypeError("pluralize() first argument must be a string")
    if count == 1 or not word:
        return word
    if word.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def conjoin(items, /, conjunction="or"):
    """
    Join items for prose: "a", "a or b", "a, b or c".
    """
    items = [str(item) for item in items]
    if len(items) < 2:
        return "".join(items)
    return f"{", ".join(items[:-1])} {conjunction} {items[-1]}"


class Introspectable(type):
    """
    Metaclass for the declarative model classes.

    Responsibilities
    - publish every name in __introspectable__ as a read-only property backed by
      "_{name}" (see mirror()).
    - derive __typename__ from the class name ("OptionModel" -> "option-model") for
      messages.
    - give instances a stable __repr__ and a __rich_repr__ for rich.pretty. Only
      __displayable__ names are shown when set, which keeps back-references (owner
      tool, owner option) out of the output and avoids cycles.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)

        if "__repr__" not in namespace:
            self.__repr__ = __repr__
        if "__rich_repr__" not in namespace:
            self.__rich_repr__ = __rich_repr__
        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "conjoin",

    # Types
    "UnsetType",
    "Introspectable",

    # Constants
    "Unset",
)
