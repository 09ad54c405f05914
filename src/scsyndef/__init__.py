"""scsyndef -- SuperCollider SynthDef (SCgf v2) codec and node ID allocation."""

__version__ = "0.1.0"

from .allocator import NamedAllocation, NodeIdAllocator
from .enums import BinaryOperator, CalculationRate, UnaryOperator
from .errors import (
    ConfigError,
    DecodeError,
    InvalidUGenIndex,
    ScsyndefError,
    StringTooLong,
    Truncated,
    UnsupportedVersion,
)
from .scfile import (
    SynthDefFile,
    decode_file,
    encode_file,
    load_file,
    load_synthdefs,
    save_file,
)
from .synthdef import (
    DecodeOptions,
    ParameterName,
    SynthDef,
    Variant,
    decode_synthdef,
    decode_synthdefs,
    encode_synthdef,
)
from .ugen import Constant, InputSpec, OutputSpec, UGen, UGenRef

__all__ = [
    "BinaryOperator",
    "CalculationRate",
    "ConfigError",
    "Constant",
    "DecodeError",
    "DecodeOptions",
    "InputSpec",
    "InvalidUGenIndex",
    "NamedAllocation",
    "NodeIdAllocator",
    "OutputSpec",
    "ParameterName",
    "ScsyndefError",
    "StringTooLong",
    "SynthDef",
    "SynthDefFile",
    "Truncated",
    "UGen",
    "UGenRef",
    "UnaryOperator",
    "UnsupportedVersion",
    "Variant",
    "decode_file",
    "decode_synthdef",
    "decode_synthdefs",
    "encode_file",
    "encode_synthdef",
    "load_file",
    "load_synthdefs",
    "save_file",
]
