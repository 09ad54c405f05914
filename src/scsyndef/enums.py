"""Enum types for scsyndef."""

import enum
from typing import SupportsInt, cast


class CalculationRate(enum.IntEnum):
    """UGen computation rate.

    Determines how often a UGen computes new output values:

    - ``SCALAR`` (0) -- computed once at synth creation (initial rate, ``.ir``).
    - ``CONTROL`` (1) -- computed once per control block, typically every 64
      samples (control rate, ``.kr``).
    - ``AUDIO`` (2) -- computed every sample (audio rate, ``.ar``).
    - ``DEMAND`` (3) -- computed only when explicitly demanded by another UGen
      (demand rate, ``.dr``).

    The codec stores rates as plain ints and never validates them; this enum
    is a naming aid for callers and for ``SynthDef.dump_ugens()``.
    """

    SCALAR = 0
    CONTROL = 1
    AUDIO = 2
    DEMAND = 3

    @classmethod
    def from_expr(cls, expr: object) -> "CalculationRate":
        """Coerce a value to a CalculationRate.

        Accepts CalculationRate instances, rate-token strings (``"ar"``,
        ``"kr"``, ``"ir"``, ``"dr"``), member names, or integers.
        """
        if isinstance(expr, cls):
            return expr
        if isinstance(expr, str):
            token_map = {
                "ar": cls.AUDIO,
                "kr": cls.CONTROL,
                "ir": cls.SCALAR,
                "dr": cls.DEMAND,
            }
            lower = expr.lower()
            if lower in token_map:
                return token_map[lower]
            return cls[expr.upper()]
        return cls(int(cast(SupportsInt, expr)))

    @property
    def token(self) -> str:
        return {0: "ir", 1: "kr", 2: "ar", 3: "dr"}[self.value]


class BinaryOperator(enum.IntEnum):
    """SuperCollider binary operator special indices.

    Each member maps to a BinaryOpUGen ``special_index`` value that selects
    the operation performed on two input signals.
    """

    ADDITION = 0
    SUBTRACTION = 1
    MULTIPLICATION = 2
    INTEGER_DIVISION = 3
    FLOAT_DIVISION = 4
    MODULO = 5
    EQUAL = 6
    NOT_EQUAL = 7
    LESS_THAN = 8
    GREATER_THAN = 9
    LESS_THAN_OR_EQUAL = 10
    GREATER_THAN_OR_EQUAL = 11
    MINIMUM = 14
    MAXIMUM = 15
    BITWISE_AND = 16
    BITWISE_OR = 17
    BITWISE_XOR = 18
    LCM = 19
    GCD = 20
    ROUND = 21
    ROUND_UP = 22
    TRUNCATION = 23
    ATAN2 = 24
    HYPOT = 25
    HYPOTX = 26
    POWER = 27
    SHIFT_LEFT = 28
    SHIFT_RIGHT = 29
    RING1 = 32
    RING2 = 33
    RING3 = 34
    RING4 = 35
    DIFFERENCE_OF_SQUARES = 36
    SUM_OF_SQUARES = 37
    SQUARE_OF_SUM = 38
    SQUARE_OF_DIFFERENCE = 39
    ABSOLUTE_DIFFERENCE = 40
    THRESHOLD = 41
    AMPLITUDE_CLIPPING = 42
    SCALE_NEGATIVE = 43
    CLIP2 = 44
    EXCESS = 45
    FOLD2 = 46
    WRAP2 = 47


class UnaryOperator(enum.IntEnum):
    """SuperCollider unary operator special indices.

    Each member maps to a UnaryOpUGen ``special_index`` value that selects
    the operation performed on a single input signal.
    """

    NEGATIVE = 0
    BIT_NOT = 4
    ABSOLUTE_VALUE = 5
    CEILING = 8
    FLOOR = 9
    FRACTIONAL_PART = 10
    SIGN = 11
    SQUARED = 12
    CUBED = 13
    SQUARE_ROOT = 14
    EXPONENTIAL = 15
    RECIPROCAL = 16
    MIDICPS = 17
    CPSMIDI = 18
    MIDIRATIO = 19
    RATIOMIDI = 20
    DBAMP = 21
    AMPDB = 22
    OCTCPS = 23
    CPSOCT = 24
    LOG = 25
    LOG2 = 26
    LOG10 = 27
    SIN = 28
    COS = 29
    TAN = 30
    ARCSIN = 31
    ARCCOS = 32
    ARCTAN = 33
    SINH = 34
    COSH = 35
    TANH = 36
    DISTORT = 42
    SOFTCLIP = 43
