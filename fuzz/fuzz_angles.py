#!/usr/bin/env python3
"""
LibFuzzer harness for angle math (normalize, circular_delta, smooth, bearing,
distance_m) and compute_guidance.

Bytes are consumed as finite doubles. Every function must return a value in
its documented range and never raise for finite input.
Run: python fuzz/fuzz_angles.py fuzz/corpus/angles/ [options]
"""

import math
import sys

try:
    import atheris
except ImportError:
    print("Install atheris: pip install atheris")
    sys.exit(1)

with atheris.instrument_imports():
    from heading_guide.angles import (
        bearing,
        circular_delta,
        distance_m,
        normalize,
        smooth,
    )
    from heading_guide.geo import GeoPoint
    from heading_guide.guidance import compute_guidance


def _finite(fdp: "atheris.FuzzedDataProvider", low: float, high: float) -> float:
    value = fdp.ConsumeFloatInRange(low, high)
    return value if math.isfinite(value) else 0.0


def test_one_input(data: bytes) -> None:
    """Single fuzz iteration: check ranges of all angle functions."""
    fdp = atheris.FuzzedDataProvider(data)
    a = _finite(fdp, -1e9, 1e9)
    b = _finite(fdp, -1e9, 1e9)
    factor = fdp.ConsumeFloatInRange(1e-6, 1.0)

    n = normalize(a)
    if not 0.0 <= n < 360.0 or normalize(n) != n:
        raise AssertionError(f"normalize({a}) = {n}")
    d = circular_delta(a, b)
    if not -180.0 < d <= 180.0:
        raise AssertionError(f"circular_delta({a}, {b}) = {d}")
    s = smooth(n, b, factor)
    if not 0.0 <= s < 360.0:
        raise AssertionError(f"smooth({n}, {b}, {factor}) = {s}")

    p = GeoPoint(_finite(fdp, -90.0, 90.0), _finite(fdp, -180.0, 180.0))
    q = GeoPoint(_finite(fdp, -90.0, 90.0), _finite(fdp, -180.0, 180.0))
    brg = bearing(p, q)
    if not 0.0 <= brg < 360.0:
        raise AssertionError(f"bearing({p}, {q}) = {brg}")
    dist = distance_m(p, q)
    if not 0.0 <= dist <= 2.1e7:
        raise AssertionError(f"distance_m({p}, {q}) = {dist}")
    if distance_m(p, p) != 0.0:
        raise AssertionError(f"distance_m({p}, {p}) != 0")
    compute_guidance(p, q, n)


def main() -> None:
    atheris.Setup(sys.argv, test_one_input)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
