"""UGen records and their SCgf encode/decode."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Union

from .enums import BinaryOperator, CalculationRate, UnaryOperator
from .errors import InvalidUGenIndex
from .primitives import (
    Buffer,
    read_int16,
    read_int32,
    read_pstring,
    read_uint8,
    write_int16,
    write_int32,
    write_pstring,
    write_uint8,
)

# Input spec discriminator marking a constant reference.
CONSTANT_SENTINEL = -1

UINT8_RANGE = (0, 2**8 - 1)
INT16_RANGE = (-(2**15), 2**15 - 1)
INT32_RANGE = (-(2**31), 2**31 - 1)


def _check_range(name: str, value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")
    return value


@dataclass(frozen=True)
class Constant:
    """Input referring to ``SynthDef.constants[index]``."""

    index: int

    def __post_init__(self) -> None:
        _check_range("index", self.index, INT32_RANGE)

    def __str__(self) -> str:
        return f"c{self.index}"


@dataclass(frozen=True)
class UGenRef:
    """Input referring to output ``output_index`` of ``SynthDef.ugens[ugen_index]``."""

    ugen_index: int
    output_index: int = 0

    def __post_init__(self) -> None:
        _check_range("ugen_index", self.ugen_index, (0, INT32_RANGE[1]))
        _check_range("output_index", self.output_index, INT32_RANGE)

    def __str__(self) -> str:
        return f"u{self.ugen_index}[{self.output_index}]"


InputSpec = Union[Constant, UGenRef]


@dataclass(frozen=True)
class OutputSpec:
    calculation_rate: int

    def __post_init__(self) -> None:
        _check_range("output calculation_rate", self.calculation_rate, UINT8_RANGE)


@dataclass(frozen=True)
class UGen:
    """One unit generator record of a SynthDef graph.

    ``calculation_rate`` is kept as a plain int, checked only against its
    uint8 field; a ``CalculationRate`` member or a rate token (``"ar"``,
    ``"kr"``, ...) is accepted and converted. Every field must fit its wire
    width or ``ValueError`` is raised. ``outputs`` may be given as rate ints,
    which are wrapped in ``OutputSpec``::

        UGen("SinOsc", "ar", inputs=[Constant(0), Constant(1)], outputs=[2])
    """

    class_name: str
    calculation_rate: int
    special_index: int = 0
    inputs: tuple[InputSpec, ...] = field(default=())
    outputs: tuple[OutputSpec, ...] = field(default=())

    def __post_init__(self) -> None:
        rate = self.calculation_rate
        if isinstance(rate, str):
            rate = CalculationRate.from_expr(rate)
        rate = _check_range("calculation_rate", int(rate), UINT8_RANGE)
        object.__setattr__(self, "calculation_rate", rate)
        object.__setattr__(
            self,
            "special_index",
            _check_range("special_index", int(self.special_index), INT16_RANGE),
        )
        inputs = tuple(self.inputs)
        for input_ in inputs:
            if not isinstance(input_, (Constant, UGenRef)):
                raise TypeError(f"Cannot use {input_!r} as a UGen input")
        object.__setattr__(self, "inputs", inputs)
        object.__setattr__(
            self, "outputs", tuple(_coerce_output(output) for output in self.outputs)
        )

    @property
    def rate(self) -> CalculationRate | int:
        """The calculation rate as a ``CalculationRate``, or the raw int if unknown."""
        try:
            return CalculationRate(self.calculation_rate)
        except ValueError:
            return self.calculation_rate

    @property
    def operator(self) -> BinaryOperator | UnaryOperator | None:
        """The operator selected by ``special_index`` for operator UGens."""
        enum_class: type[BinaryOperator] | type[UnaryOperator]
        if self.class_name == "BinaryOpUGen":
            enum_class = BinaryOperator
        elif self.class_name == "UnaryOpUGen":
            enum_class = UnaryOperator
        else:
            return None
        try:
            return enum_class(self.special_index)
        except ValueError:
            return None


def _coerce_output(output: OutputSpec | int) -> OutputSpec:
    if isinstance(output, OutputSpec):
        return output
    return OutputSpec(int(output))


def _decode_input_spec(data: Buffer, section: str) -> tuple[InputSpec, Buffer]:
    start = data
    ugen_index, data = read_int32(data, section)
    index, data = read_int32(data, section)
    if ugen_index == CONSTANT_SENTINEL:
        return Constant(index), data
    if ugen_index < 0:
        raise InvalidUGenIndex(ugen_index, section=section, remaining=len(start))
    return UGenRef(ugen_index, index), data


def decode_ugen(data: Buffer, section: str = "ugen") -> tuple[UGen, Buffer]:
    """Decode one UGen record; ``section`` labels errors raised while reading it."""
    class_name, data = read_pstring(data, f"{section} class name")
    calculation_rate, data = read_uint8(data, f"{section} calculation rate")
    input_count, data = read_int32(data, f"{section} input count")
    output_count, data = read_int32(data, f"{section} output count")
    special_index, data = read_int16(data, f"{section} special index")
    inputs = []
    for i in range(input_count):
        input_, data = _decode_input_spec(data, f"{section} input {i}")
        inputs.append(input_)
    outputs = []
    for i in range(output_count):
        output_rate, data = read_uint8(data, f"{section} output {i}")
        outputs.append(OutputSpec(output_rate))
    ugen = UGen(
        class_name=class_name,
        calculation_rate=calculation_rate,
        special_index=special_index,
        inputs=tuple(inputs),
        outputs=tuple(outputs),
    )
    return ugen, data


def decode_ugens(
    data: Buffer, count: int, prefix: str = ""
) -> tuple[tuple[UGen, ...], Buffer]:
    ugens = []
    for position in range(count):
        ugen, data = decode_ugen(data, f"{prefix}ugen {position}")
        ugens.append(ugen)
    return tuple(ugens), data


def _encode_input_spec(input_: InputSpec) -> bytes:
    if isinstance(input_, Constant):
        return write_int32(CONSTANT_SENTINEL) + write_int32(input_.index)
    elif isinstance(input_, UGenRef):
        return write_int32(input_.ugen_index) + write_int32(input_.output_index)
    raise TypeError(f"Cannot encode {input_!r} as an input spec")


def encode_ugen(ugen: UGen) -> bytes:
    return b"".join(
        [
            write_pstring(ugen.class_name),
            write_uint8(ugen.calculation_rate),
            write_int32(len(ugen.inputs)),
            write_int32(len(ugen.outputs)),
            write_int16(ugen.special_index),
            *(_encode_input_spec(input_) for input_ in ugen.inputs),
            *(write_uint8(output.calculation_rate) for output in ugen.outputs),
        ]
    )


def encode_ugens(ugens: Iterable[UGen]) -> bytes:
    """Encode UGen records back-to-back, without the leading count."""
    return b"".join(encode_ugen(ugen) for ugen in ugens)
