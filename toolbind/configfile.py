"""
Configuration text format (git-config style) for ConfigStore.

    # comment            ; comment
    [defaults]
    encoding = UTF-8
    offline
    [compiler]
    source = source
    source = generated      # repeated names accumulate values in order
    [repository "local.cache"]
    url = "~/.cache/repo"   # quoted values keep '#', ';' and edge spaces

- "[a.b]" and '[a "b"]' both name section "a.b".
- a bare name is the boolean "true".
- names are ASCII letters, digits, "_" and "-", the same components config keys accept, so
  every store dumps to text that reads back.
- quoted values understand \\\\, \\", \\n and \\t.

Layering
- layered(*paths) merges existing files in order; later files win key by key.
- default() layers the files listed in the TOOLBIND_CONFIG environment variable
  (separated by os.pathsep); this is the source of config.current().
"""
import logging
import os
import pathlib
import re

from .config import COMPONENT, ConfigStore
from .faults import ConfigFileError
from .utils import Unset

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLE = "TOOLBIND_CONFIG"

_SECTION = re.compile(r'\[\s*([A-Za-z0-9_.-]+)(?:\s+"((?:[^"\\]|\\.)*)")?\s*]')
_OPTION = re.compile(rf"({COMPONENT.pattern})\s*(?:=(.*))?")
_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "t": "\t"}


def _unescape(text, line, source):
    result = []
    characters = iter(text)
    for char in characters:
        if char == "\\":
            escaped = next(characters, "")
            if escaped not in _ESCAPES or not escaped:
                raise ConfigFileError(f"invalid escape '\\{escaped}'", line=line, source=source)
            result.append(_ESCAPES[escaped])
        else:
            result.append(char)
    return "".join(result)


def _value(text, line, source):
    # unquoted runs are trimmed at the edges; quoted runs are kept verbatim
    quoted = False
    buffer = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\":
            if index + 1 >= len(text):
                raise ConfigFileError("dangling escape", line=line, source=source)
            escaped = text[index + 1]
            if escaped not in _ESCAPES:
                raise ConfigFileError(f"invalid escape '\\{escaped}'", line=line, source=source)
            buffer.append((_ESCAPES[escaped], True))
            index += 2
            continue
        if char == '"':
            quoted = not quoted
        elif not quoted and char in "#;":
            break
        else:
            buffer.append((char, quoted))
        index += 1
    if quoted:
        raise ConfigFileError("unterminated quoted value", line=line, source=source)

    # strip unquoted whitespace at both ends
    while buffer and not buffer[0][1] and buffer[0][0].isspace():
        buffer.pop(0)
    while buffer and not buffer[-1][1] and buffer[-1][0].isspace():
        buffer.pop()
    return "".join(char for char, _ in buffer)


def loads(text, /, store=Unset, source=Unset):
    """
    Read configuration text into `store` (a new ConfigStore when Unset) and return it.

    Values of a name repeated within the text accumulate; a name already defined in `store`
    before reading is replaced.
    """
    if not isinstance(text, str):
        raise TypeError("loads() argument must be a string")
    if store is Unset:
        store = ConfigStore()
    values = {}
    section = None
    for line, raw in enumerate(text.splitlines(), 1):
        stripped = raw.strip()
        if not stripped or stripped.startswith(("#", ";")):
            continue
        if stripped.startswith("["):
            if not (match := _SECTION.match(stripped)):
                raise ConfigFileError(f"malformed section header {stripped!r}", line=line, source=source)
            remainder = stripped[match.end():].strip()
            if remainder and not remainder.startswith(("#", ";")):
                raise ConfigFileError(f"unexpected text after section header {remainder!r}", line=line, source=source)
            name, subsection = match.groups()
            section = name if subsection is None else f"{name}.{_unescape(subsection, line, source)}"
            if not all(COMPONENT.fullmatch(part) for part in section.split(".")):
                raise ConfigFileError(f"malformed section name {section!r}", line=line, source=source)
            continue
        if not (match := _OPTION.fullmatch(stripped)) and not (match := _OPTION.match(stripped)):
            raise ConfigFileError(f"malformed line {stripped!r}", line=line, source=source)
        name, value = match.groups()
        if value is None:
            trailing = stripped[match.end():].strip()
            if trailing and not trailing.startswith(("#", ";")):
                raise ConfigFileError(f"malformed line {stripped!r}", line=line, source=source)
            value = "true"
        else:
            value = _value(value, line, source)
        if section is None:
            raise ConfigFileError(f"option {name!r} outside of any section", line=line, source=source)
        values.setdefault(f"{section}.{name}", []).append(value)

    for key, entries in values.items():
        store.setall(key, entries)
    return store


def load(path, /, store=Unset, encoding="utf-8"):
    """
    Read a configuration file into `store` (a new ConfigStore when Unset) and return it.
    """
    path = pathlib.Path(path)
    logger.debug("loading configuration from %s", path)
    return loads(path.read_text(encoding=encoding), store=store, source=path)


def _quote(value):
    if value and not value[0].isspace() and not value[-1].isspace() and not re.search(r'[#;"\\\n\t]', value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\t", "\\t")
    return f'"{escaped}"'


def dumps(store, /):
    """
    Render a ConfigStore as configuration text; loads(dumps(store)) gives an equal store.
    """
    sections = {}
    for key in store.options():
        section, _, name = key.rpartition(".")
        sections.setdefault(section, []).append((name, store.getall(key) or []))

    lines = []
    for section in sorted(sections):
        if lines:
            lines.append("")
        head, _, tail = section.partition(".")
        if tail:
            tail = tail.replace("\\", "\\\\").replace('"', '\\"')
            lines.append(f'[{head} "{tail}"]')
        else:
            lines.append(f"[{head}]")
        for name, values in sections[section]:
            lines.extend(f"{name} = {_quote(value)}" for value in values)
    return "\n".join(lines) + ("\n" if lines else "")


def dump(store, path, /, encoding="utf-8"):
    path = pathlib.Path(path)
    path.write_text(dumps(store), encoding=encoding)
    return path


def layered(*paths):
    """
    Merge the existing files among `paths`, in order, into a new store.
    """
    store = ConfigStore()
    for path in paths:
        if not (path := pathlib.Path(path)).is_file():
            logger.debug("skipping missing configuration %s", path)
            continue
        store.merge(load(path))
    return store


def default():
    """
    Build the process-wide store from the files listed in TOOLBIND_CONFIG.
    """
    paths = [path for path in os.environ.get(ENVIRONMENT_VARIABLE, "").split(os.pathsep) if path]
    return layered(*paths)


__all__ = (
    "loads",
    "load",
    "dumps",
    "dump",
    "layered",
    "default",
)
