"""
Well-known tool option defaults, read from the configuration store.

Every accessor takes an optional store and falls back to config.current().
"""
import pathlib

from . import config
from .utils import Unset

DEFAULTS_ENCODING = "defaults.encoding"
DEFAULTS_OFFLINE = "defaults.offline"
DEFAULTS_TIMEOUT = "defaults.timeout"
DEFAULTS_MAVENOVERRIDES = "defaults.mavenoverrides"

COMPILER_SOURCE = "compiler.source"
COMPILER_RESOURCE = "compiler.resource"
COMPILER_RESOURCE_ROOT = "compiler.resourceroot"
COMPILER_SCRIPT = "compiler.script"
COMPILER_DOC = "compiler.doc"
COMPILER_NOOSGI = "compiler.noosgi"
COMPILER_NOPOM = "compiler.nopom"
COMPILER_PACK200 = "compiler.pack200"

RUNTOOL_COMPILE = "runtool.compile"
TESTTOOL_COMPILE = "testtool.compile"

# milliseconds
DEFAULT_TIMEOUT = 20 * 1000
DEFAULT_SOURCE_DIR = "source"
DEFAULT_RESOURCE_DIR = "resource"
DEFAULT_SCRIPT_DIR = "script"
DEFAULT_DOC_DIR = "doc"
DEFAULT_RESOURCE_ROOT = "ROOT"
DEFAULT_RUNTOOL_COMPILATION_FLAGS = "never"
DEFAULT_TESTTOOL_COMPILATION_FLAGS = "once"


def _store(store):
    return config.current() if store is Unset else store


def _directories(store, key, fallback):
    if (values := _store(store).getall(key)) is None:
        values = [fallback]
    return [pathlib.Path(value) for value in values]


def encoding(store=Unset, /):
    return _store(store).get(DEFAULTS_ENCODING)


def offline(store=Unset, /):
    return _store(store).getbool(DEFAULTS_OFFLINE, False)


def timeout(store=Unset, /):
    return _store(store).getnumber(DEFAULTS_TIMEOUT, DEFAULT_TIMEOUT)


def mavenoverrides(store=Unset, /):
    return _store(store).get(DEFAULTS_MAVENOVERRIDES)


def sourcedirs(store=Unset, /):
    return _directories(store, COMPILER_SOURCE, DEFAULT_SOURCE_DIR)


def resourcedirs(store=Unset, /):
    return _directories(store, COMPILER_RESOURCE, DEFAULT_RESOURCE_DIR)


def scriptdirs(store=Unset, /):
    return _directories(store, COMPILER_SCRIPT, DEFAULT_SCRIPT_DIR)


def docdirs(store=Unset, /):
    return _directories(store, COMPILER_DOC, DEFAULT_DOC_DIR)


def resourceroot(store=Unset, /):
    return _store(store).get(COMPILER_RESOURCE_ROOT, DEFAULT_RESOURCE_ROOT)


def noosgi(store=Unset, /):
    return _store(store).getbool(COMPILER_NOOSGI, False)


def nopom(store=Unset, /):
    return _store(store).getbool(COMPILER_NOPOM, False)


def pack200(store=Unset, /):
    return _store(store).getbool(COMPILER_PACK200, False)


def runtoolcompile(store=Unset, /):
    """
    When the run tool compiles modules before running them ("never" by default).
    """
    return _store(store).get(RUNTOOL_COMPILE, DEFAULT_RUNTOOL_COMPILATION_FLAGS)


def testtoolcompile(store=Unset, /):
    """
    When the test tool compiles modules before testing them ("once" by default).
    """
    return _store(store).get(TESTTOOL_COMPILE, DEFAULT_TESTTOOL_COMPILATION_FLAGS)


__all__ = (
    "encoding",
    "offline",
    "timeout",
    "mavenoverrides",
    "sourcedirs",
    "resourcedirs",
    "scriptdirs",
    "docdirs",
    "resourceroot",
    "noosgi",
    "nopom",
    "pack200",
    "runtoolcompile",
    "testtoolcompile",
)
