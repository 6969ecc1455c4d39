import enum
import pathlib
import sys

from rich.pretty import pprint

from toolbind import *


class Level(enum.Enum):
    quiet = "quiet"
    normal = "normal"
    verbose_all = "verbose-all"


top = ToolModel("")
top.add_option("cwd", type=pathlib.Path)
top.add_option("level", "l", type=Level)
top.add_option("define", "D", multiplicity="*")

compiler = ToolModel("compile", parent=top)
compiler.add_option("out", "o", type=pathlib.Path)
compiler.add_option("offline", type=bool)
compiler.add_argument("modules", multiplicity="+")

tools = {"compile": compiler}
top.set_subtool(tools)


if __name__ == '__main__':
    try:
        pprint(bind(top, sys.argv[1:] or "--level=verbose-all -Dx -Dy compile -o out a.b c.d"))
    except ToolError as fault:
        trigger(fault, shell=True, tool=top)
