"""SynthDef values and the SCgf per-definition encode/decode."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import NamedTuple

from .enums import CalculationRate
from .errors import DecodeError
from .primitives import (
    Buffer,
    read_float,
    read_floats,
    read_int16,
    read_int32,
    read_pstring,
    to_float32,
    write_float,
    write_floats,
    write_int16,
    write_int32,
    write_pstring,
)
from .ugen import Constant, UGen, UGenRef, decode_ugens, encode_ugens

logger = logging.getLogger(__name__)


class ParameterName(NamedTuple):
    name: str
    index: int


class Variant(NamedTuple):
    name: str
    value: float


@dataclass(frozen=True)
class DecodeOptions:
    """Decoder configuration.

    ``float_precision`` rounds decoded constants, parameter values and
    variant values to that many decimal places. ``None`` (the default)
    keeps the exact float32 values, which is required for byte-identical
    re-encoding.
    """

    float_precision: int | None = None

    def __post_init__(self) -> None:
        if self.float_precision is not None and self.float_precision < 0:
            raise ValueError(
                f"float_precision must be >= 0, got {self.float_precision}"
            )

    def normalize(self, value: float) -> float:
        if self.float_precision is None:
            return value
        return to_float32(round(value, self.float_precision))


DEFAULT_DECODE_OPTIONS = DecodeOptions()


@dataclass(frozen=True, repr=False)
class SynthDef:
    """An immutable synth definition: a named graph of UGens.

    Sequences are stored as tuples and every float is narrowed to float32,
    so a decoded definition compares equal to the one that was encoded::

        synthdef = SynthDef(
            "noise",
            constants=[0.2],
            ugens=[
                UGen("BrownNoise", "ar", outputs=[2]),
                UGen(
                    "BinaryOpUGen",
                    "ar",
                    special_index=BinaryOperator.MULTIPLICATION,
                    inputs=[UGenRef(0), Constant(0)],
                    outputs=[2],
                ),
            ],
        )

    References between UGens and constants are not checked here.
    """

    name: str
    constants: tuple[float, ...] = field(default=())
    parameters: tuple[float, ...] = field(default=())
    parameter_names: tuple[ParameterName, ...] = field(default=())
    ugens: tuple[UGen, ...] = field(default=())
    variants: tuple[Variant, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "constants", tuple(to_float32(x) for x in self.constants)
        )
        object.__setattr__(
            self, "parameters", tuple(to_float32(x) for x in self.parameters)
        )
        object.__setattr__(
            self,
            "parameter_names",
            tuple(
                ParameterName(str(name), int(index))
                for name, index in self.parameter_names
            ),
        )
        ugens = tuple(self.ugens)
        for ugen in ugens:
            if not isinstance(ugen, UGen):
                raise TypeError(f"Expected UGen, got {ugen!r}")
        object.__setattr__(self, "ugens", ugens)
        object.__setattr__(
            self,
            "variants",
            tuple(
                Variant(str(name), to_float32(value)) for name, value in self.variants
            ),
        )

    def __repr__(self) -> str:
        return f"<SynthDef: {self.name}>"

    @property
    def anonymous_name(self) -> str:
        """MD5 hex digest of the encoded graph, excluding the name."""
        return hashlib.md5(_encode_graph(self)).hexdigest()

    def parameter_index(self, name: str) -> int | None:
        """Return the parameter index bound to ``name``, or None."""
        for parameter_name in self.parameter_names:
            if parameter_name.name == name:
                return parameter_name.index
        return None

    def compile(self) -> bytes:
        """Encode this definition alone, without the file header."""
        return encode_synthdef(self)

    def dump_ugens(self) -> str:
        """Return a readable listing of the UGen graph, one UGen per line."""
        lines = [self.name]
        for index, ugen in enumerate(self.ugens):
            rate = ugen.rate
            token = rate.token if isinstance(rate, CalculationRate) else str(rate)
            label = f"{index}_{ugen.class_name}"
            if ugen.operator is not None:
                label += f"({ugen.operator.name.lower()})"
            inputs = ", ".join(self._format_input(input_) for input_ in ugen.inputs)
            lines.append(f"  {label}: {token} [{inputs}]")
        return "\n".join(lines)

    def _format_input(self, input_: Constant | UGenRef) -> str:
        if isinstance(input_, Constant):
            if 0 <= input_.index < len(self.constants):
                return repr(self.constants[input_.index])
            return str(input_)
        if input_.ugen_index < len(self.ugens):
            class_name = self.ugens[input_.ugen_index].class_name
            return f"{input_.ugen_index}_{class_name}[{input_.output_index}]"
        return str(input_)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode_parameter_names(parameter_names: Sequence[ParameterName]) -> bytes:
    return b"".join(
        [
            write_int32(len(parameter_names)),
            *(
                write_pstring(name) + write_int32(index)
                for name, index in parameter_names
            ),
        ]
    )


def _encode_variants(variants: Sequence[Variant]) -> bytes:
    return b"".join(
        [
            write_int16(len(variants)),
            *(write_pstring(name) + write_float(value) for name, value in variants),
        ]
    )


def _encode_graph(synthdef: SynthDef) -> bytes:
    return b"".join(
        [
            write_int32(len(synthdef.constants)),
            write_floats(synthdef.constants),
            write_int32(len(synthdef.parameters)),
            write_floats(synthdef.parameters),
            _encode_parameter_names(synthdef.parameter_names),
            write_int32(len(synthdef.ugens)),
            encode_ugens(synthdef.ugens),
            _encode_variants(synthdef.variants),
        ]
    )


def encode_synthdef(synthdefs: SynthDef | Iterable[SynthDef]) -> bytes:
    """Encode one SynthDef, or several concatenated with no separator."""
    if isinstance(synthdefs, SynthDef):
        return write_pstring(synthdefs.name) + _encode_graph(synthdefs)
    return b"".join(encode_synthdef(synthdef) for synthdef in synthdefs)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _decode_synthdef(
    data: Buffer, options: DecodeOptions, position: int = 0
) -> tuple[SynthDef, Buffer]:
    section = f"synthdef {position}"
    name, data = read_pstring(data, f"{section} name")
    constant_count, data = read_int32(data, f"{section} constant count")
    constants, data = read_floats(data, constant_count, f"{section} constants")
    parameter_count, data = read_int32(data, f"{section} parameter count")
    parameters, data = read_floats(data, parameter_count, f"{section} parameters")
    parameter_name_count, data = read_int32(
        data, f"{section} parameter name count"
    )
    parameter_names = []
    for i in range(parameter_name_count):
        parameter_name, data = read_pstring(data, f"{section} parameter name {i}")
        parameter_index, data = read_int32(data, f"{section} parameter index {i}")
        parameter_names.append(ParameterName(parameter_name, parameter_index))
    ugen_count, data = read_int32(data, f"{section} ugen count")
    ugens, data = decode_ugens(data, ugen_count, prefix=f"{section} ")
    variant_count, data = read_int16(data, f"{section} variant count")
    variants = []
    for i in range(variant_count):
        variant_name, data = read_pstring(data, f"{section} variant name {i}")
        variant_value, data = read_float(data, f"{section} variant value {i}")
        variants.append(Variant(variant_name, options.normalize(variant_value)))
    synthdef = SynthDef(
        name=name,
        constants=tuple(options.normalize(x) for x in constants),
        parameters=tuple(options.normalize(x) for x in parameters),
        parameter_names=tuple(parameter_names),
        ugens=ugens,
        variants=tuple(variants),
    )
    return synthdef, data


def decode_synthdefs(
    data: Buffer,
    count: int,
    options: DecodeOptions | None = None,
) -> tuple[tuple[SynthDef, ...], bytes]:
    """Decode ``count`` back-to-back SynthDefs.

    Returns the definitions in order and the undecoded remainder. Decoding
    stops at the first malformed section; the raised ``DecodeError`` carries
    the byte ``offset`` of the failing read relative to ``data``.
    """
    options = options or DEFAULT_DECODE_OPTIONS
    buffer = memoryview(data)
    remainder: Buffer = buffer
    synthdefs = []
    try:
        for position in range(count):
            synthdef, remainder = _decode_synthdef(remainder, options, position)
            synthdefs.append(synthdef)
    except DecodeError as error:
        error.locate(len(buffer))
        logger.debug("SynthDef decode failed at byte %s: %s", error.offset, error)
        raise
    return tuple(synthdefs), bytes(remainder)


def decode_synthdef(
    data: Buffer, options: DecodeOptions | None = None
) -> tuple[SynthDef, bytes]:
    """Decode a single SynthDef from the front of ``data``.

    Returns the SynthDef and the bytes following it.
    """
    synthdefs, remainder = decode_synthdefs(data, 1, options)
    return synthdefs[0], remainder
