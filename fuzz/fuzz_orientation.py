#!/usr/bin/env python3
"""
LibFuzzer harness for orientation decoding (OrientationEvent.from_dict,
decode_orientation).

Feed raw bytes as JSON: {"alpha":float,"absolute":bool,"webkitCompassHeading":...,
"screen_rotation":...}. A decoded heading must always be in [0, 360).
Run: python fuzz/fuzz_orientation.py fuzz/corpus/orientation/ [options]
"""

import json
import sys

try:
    import atheris
except ImportError:
    print("Install atheris: pip install atheris")
    sys.exit(1)

with atheris.instrument_imports():
    from heading_guide.orientation import OrientationEvent, decode_orientation


def test_one_input(data: bytes) -> None:
    """Single fuzz iteration: decode JSON as an orientation event."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return
    try:
        obj = json.loads(text)
    except (ValueError, RecursionError):
        return
    event = OrientationEvent.from_dict(obj)
    rotation = obj.get("screen_rotation") if isinstance(obj, dict) else None
    reading = decode_orientation(event, rotation)
    if reading is not None and not 0.0 <= reading.heading < 360.0:
        raise AssertionError(f"heading out of range: {reading}")


def main() -> None:
    atheris.Setup(sys.argv, test_one_input)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
