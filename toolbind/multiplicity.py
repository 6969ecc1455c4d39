"""
Multiplicities: how many times an option may be given, or how many tokens a positional
argument absorbs.

A multiplicity is a closed interval [min, max] where max may be UNBOUNDED. Instances are
immutable and hashable; the well-known ones are module constants shared by every model.
"""
import math
import re

UNBOUNDED = math.inf


class Multiplicity:
    """
    Immutable [min, max] bound on a number of values.

    Invariants
    - 0 <= min <= max; max is an int or UNBOUNDED.
    - multivalued ⇔ max > 1.
    - range ⇔ min != max.
    """
    __slots__ = ("_min", "_max")

    def __init__(self, min, max=UNBOUNDED):
        if isinstance(max, float) and max == math.inf:
            max = UNBOUNDED
        if not isinstance(min, int) or isinstance(min, bool):
            raise TypeError("multiplicity minimum must be an integer")
        if max is not UNBOUNDED and (not isinstance(max, int) or isinstance(max, bool)):
            raise TypeError("multiplicity maximum must be an integer or UNBOUNDED")
        if min < 0:
            raise ValueError("multiplicity minimum must be non-negative")
        if max < min:
            raise ValueError(f"multiplicity maximum {max} is less than minimum {min}")
        object.__setattr__(self, "_min", min)
        object.__setattr__(self, "_max", max)

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__name__!r} object is immutable")

    @property
    def min(self):
        return self._min

    @property
    def max(self):
        return self._max

    @property
    def unbounded(self):
        return self._max is UNBOUNDED

    @property
    def multivalued(self):
        return self._max > 1

    @property
    def range(self):
        return self._min != self._max

    def contains(self, count, /):
        return self._min <= count <= self._max

    def __eq__(self, other, /):
        if not isinstance(other, Multiplicity):
            return NotImplemented
        return (self._min, self._max) == (other._min, other._max)

    def __hash__(self):
        return hash((Multiplicity, self._min, self._max))

    def __str__(self):
        if not self.range:
            return f"[{self._min}]"
        return f"[{self._min}..{"*" if self.unbounded else self._max}]"

    def __repr__(self):
        return f"Multiplicity{self}"

    @classmethod
    def fromnargs(cls, nargs, /):
        """
        Map argparse-style arity spellings onto a multiplicity.

        - "?"   → [0..1]
        - "*"   → [0..*]
        - "+"   → [1..*]
        - n     → [n]   (n >= 0)
        """
        match nargs:
            case "?":
                return ZERO_OR_ONE
            case "*":
                return ZERO_OR_MORE
            case "+":
                return ONE_OR_MORE
            case int() if not isinstance(nargs, bool):
                return cls(nargs, nargs)
            case _:
                raise ValueError(f"invalid nargs {nargs!r}")

    @classmethod
    def parse(cls, text, /):
        """
        Read the bracketed form: "[1]", "[0..1]", "[2..*]".
        """
        if not isinstance(text, str):
            raise TypeError("Multiplicity.parse() argument must be a string")
        if not (match := re.fullmatch(r"\[\s*(\d+)\s*(?:\.\.\s*(\d+|\*)\s*)?]", text.strip())):
            raise ValueError(f"invalid multiplicity {text!r}")
        lower, upper = match.groups()
        if upper is None:
            return cls(int(lower), int(lower))
        return cls(int(lower), UNBOUNDED if upper == "*" else int(upper))


ZERO_OR_ONE = Multiplicity(0, 1)
ONE = Multiplicity(1, 1)
ZERO_OR_MORE = Multiplicity(0, UNBOUNDED)
ONE_OR_MORE = Multiplicity(1, UNBOUNDED)

__all__ = (
    "Multiplicity",
    "UNBOUNDED",
    "ZERO_OR_ONE",
    "ONE",
    "ZERO_OR_MORE",
    "ONE_OR_MORE",
)
