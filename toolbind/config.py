"""
toolbind configuration store (hierarchical, thread-safe, dotted keys).

Keys
- "s1.s2...sn.option": at least one section component and an option component, each made
  of ASCII letters, digits, "_" and "-" (the names the text format can write back).
- section of a key: "s1...sn"; its parent section: "s1...s(n-1)" ("" at the root).
- inserting a key registers the whole ancestor chain, so every prefix of a defined key is a
  known section, and each section knows its direct subsections and direct options.

Values
- every defined key maps to a non-empty, ordered list of strings. Typed accessors read the
  first value (numbers, booleans) and fall back to a default on missing or malformed text.

Concurrency
- each store guards its values and both indexes with one re-entrant lock.
- the process-wide store (current()) is created lazily and replaced (install()) under a
  module lock; callers already holding the previous store keep using it.
"""
import logging
import re
import threading

from .faults import MalformedKeyError

logger = logging.getLogger(__name__)

SECTION_MARKER = "#"
TRUE_VALUES = frozenset({"true", "on", "yes", "1"})
# a section or option name; keys are these joined with "."
COMPONENT = re.compile(r"[A-Za-z0-9_-]+")
_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)


class ConfigKey:
    """
    A parsed dotted key.

    Attributes
    - parent: sections above the subsection, "" when the key has two components.
    - subsection: the last section component.
    - section: parent and subsection joined.
    - option: the last component.

    Raises MalformedKeyError for keys with fewer than two components, or with a component
    that is empty or holds anything but ASCII letters, digits, "_" and "-".
    """
    __slots__ = ("key", "parent", "subsection", "section", "option")

    def __init__(self, key, /):
        if not isinstance(key, str):
            raise TypeError("configuration key must be a string")
        parts = key.split(".")
        if len(parts) < 2 or not all(COMPONENT.fullmatch(part) for part in parts):
            raise MalformedKeyError(key)
        self.key = key
        self.parent = ".".join(parts[:-2])
        self.subsection = parts[-2]
        self.section = f"{self.parent}.{self.subsection}" if self.parent else self.subsection
        self.option = parts[-1]

    def __repr__(self):
        return f"ConfigKey({self.key!r})"


class ConfigStore:
    """
    Hierarchical key/value configuration.

    Reading
    - get(key, default=None) / getall(key)
    - getnumber(key, default=None) / getbool(key, default=None)
    - isdefined(key) / hassection(section)
    - sections(section=None) / options(section=None)

    Writing
    - set(key, value) / setall(key, values) / setnumber / setbool
    - remove(key)
    - merge(other)

    Every operation holds the store lock for its whole duration.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._values = {}
        self._sections = {"": set()}
        self._names = {}

    def _register(self, key, /):
        key = ConfigKey(key)
        if key.parent:
            self._register(f"{key.parent}.{SECTION_MARKER}")
        self._sections.setdefault(key.parent, set()).add(key.subsection)
        self._sections.setdefault(key.section, set())
        if key.option != SECTION_MARKER:
            self._names.setdefault(key.section, set()).add(key.option)
        return key

    def get(self, key, default=None, /):
        with self._lock:
            values = self._values.get(key)
            return values[0] if values else default

    def getall(self, key, /):
        with self._lock:
            values = self._values.get(key)
            return list(values) if values is not None else None

    def set(self, key, value, /):
        self.setall(key, [value] if value is not None else None)

    def setall(self, key, values, /):
        """
        Replace every value of `key`; None or an empty sequence removes the key.
        """
        if isinstance(values, str):
            raise TypeError("setall() values must be a sequence of strings, not a string")
        values = tuple(values) if values is not None else ()
        for value in values:
            if not isinstance(value, str):
                raise TypeError(f"configuration values must be strings, not {type(value).__name__!r}")
        with self._lock:
            if not values:
                self._remove(key)
                return
            self._register(key)
            self._values[key] = values
            logger.debug("set %s = %r", key, values)

    def _remove(self, key):
        key = ConfigKey(key)
        self._values.pop(key.key, None)
        if (names := self._names.get(key.section)) is not None:
            names.discard(key.option)

    def remove(self, key, /):
        """
        Drop the values of `key`. Sections are never pruned, even when left empty.
        """
        with self._lock:
            self._remove(key)

    def isdefined(self, key, /):
        with self._lock:
            return key in self._values

    def hassection(self, section, /):
        with self._lock:
            return section in self._sections

    def sections(self, section=None, /):
        """
        List section names.

        - None → every known section except the root (full dotted names).
        - ""   → direct subsections of the root.
        - name → direct subsections of that section ([] when unknown).
        """
        with self._lock:
            if section is None:
                return sorted(name for name in self._sections if name)
            return sorted(self._sections.get(section, ()))

    def options(self, section=None, /):
        """
        List option names.

        - None → every defined key (full dotted names).
        - name → direct option names of that section; None when the section is unknown.
        """
        with self._lock:
            if section is None:
                return sorted(self._values)
            if section not in self._sections:
                return None
            return sorted(self._names.get(section, ()))

    def getnumber(self, key, default=None, /):
        """
        Return the first value of `key` as an integer (optionally signed decimal digits);
        malformed or missing values give `default`.
        """
        if (value := self.get(key)) is None or not _INTEGER.fullmatch(value):
            return default
        return int(value)

    def setnumber(self, key, value, /):
        if value is None:
            return self.remove(key)
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("setnumber() value must be an integer")
        self.set(key, str(value))

    def getbool(self, key, default=None, /):
        """
        Return the first value of `key` as a boolean: true for "true", "on", "yes" and "1",
        false for anything else; a missing key gives `default`.
        """
        if (value := self.get(key)) is None:
            return default
        return value in TRUE_VALUES

    def setbool(self, key, value, /):
        if value is None:
            return self.remove(key)
        self.set(key, "true" if value else "false")

    def _snapshot(self):
        with self._lock:
            return list(self._values.items())

    def merge(self, other, /):
        """
        Copy every key of `other` into this store, overwriting existing keys. Returns self.
        """
        if not isinstance(other, ConfigStore):
            raise TypeError("merge() argument must be a ConfigStore")
        items = other._snapshot()
        with self._lock:
            for key, values in items:
                self._register(key)
                self._values[key] = values
        logger.debug("merged %d keys", len(items))
        return self

    def copy(self):
        return ConfigStore().merge(self)

    def __contains__(self, key, /):
        return self.isdefined(key)

    def __len__(self):
        with self._lock:
            return len(self._values)

    def __str__(self):
        from .configfile import dumps

        return dumps(self)

    def __repr__(self):
        return f"ConfigStore({dict(self._snapshot())!r})"

    def __rich_repr__(self):
        for key, values in sorted(self._snapshot()):
            yield key, list(values)


_lock = threading.Lock()
_instance = None


def current():
    """
    Return the process-wide store, loading it with configfile.default() on first use.
    """
    global _instance
    with _lock:
        if _instance is None:
            from .configfile import default

            _instance = default()
        return _instance


def install(store, /):
    """
    Replace the process-wide store; None resets it so the next current() reloads.
    """
    global _instance
    if store is not None and not isinstance(store, ConfigStore):
        raise TypeError("install() argument must be a ConfigStore or None")
    with _lock:
        _instance = store


def get(key, default=None, /):
    return current().get(key, default)


__all__ = (
    "ConfigKey",
    "ConfigStore",
    "current",
    "install",
)
