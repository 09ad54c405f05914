import struct

import pytest

from scsyndef import Constant, SynthDef, UGen, UGenRef


@pytest.fixture()
def ambient() -> SynthDef:
    """Brown noise scaled by 0.2 and written to the ``out`` bus."""
    return SynthDef(
        "ambient",
        constants=[0.2],
        parameters=[0.0],
        parameter_names=[("out", 0)],
        ugens=[
            UGen("Control", 1, outputs=[1]),
            UGen("BrownNoise", 2, outputs=[2]),
            UGen(
                "BinaryOpUGen",
                2,
                special_index=2,
                inputs=[UGenRef(1, 0), Constant(0)],
                outputs=[2],
            ),
            UGen("Out", 2, inputs=[UGenRef(0, 0), UGenRef(2, 0)], outputs=[]),
        ],
        variants=[],
    )


@pytest.fixture()
def ambient_bytes() -> bytes:
    """The SCgf encoding of the ``ambient`` SynthDef, without file header."""
    return b"".join(
        [
            b"\x07ambient",
            struct.pack(">if", 1, 0.2),
            struct.pack(">if", 1, 0.0),
            struct.pack(">i", 1) + b"\x03out" + struct.pack(">i", 0),
            struct.pack(">i", 4),
            b"\x07Control" + struct.pack(">BiihB", 1, 0, 1, 0, 1),
            b"\x0aBrownNoise" + struct.pack(">BiihB", 2, 0, 1, 0, 2),
            b"\x0cBinaryOpUGen"
            + struct.pack(">Biih", 2, 2, 1, 2)
            + struct.pack(">iiii", 1, 0, -1, 0)
            + struct.pack(">B", 2),
            b"\x03Out"
            + struct.pack(">Biih", 2, 2, 0, 0)
            + struct.pack(">iiii", 0, 0, 2, 0),
            struct.pack(">h", 0),
        ]
    )
