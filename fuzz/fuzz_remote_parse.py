#!/usr/bin/env python3
"""
LibFuzzer harness for remote protocol parsing and dispatch.

Feed raw bytes (UTF-8). Fuzzer exercises JSON parsing, type coercion and
the Navigator ingest paths the parsed events reach.
Run: python fuzz/fuzz_remote_parse.py fuzz/corpus/remote_parse/ [options]
"""

import sys

try:
    import atheris
except ImportError:
    print("Install atheris: pip install atheris")
    sys.exit(1)

with atheris.instrument_imports():
    from heading_guide.navigator import Navigator
    from heading_guide.sources.remote import RemoteSource


def test_one_input(data: bytes) -> None:
    """Single fuzz iteration: parse one line, dispatch the events it produced."""
    try:
        line = data.decode("utf-8").strip()
    except UnicodeDecodeError:
        return
    source = RemoteSource(host="127.0.0.1", port=0)
    source._parse_line(line)
    navigator = Navigator()
    for event in source.drain():
        navigator.dispatch(event)
    heading = navigator.snapshot().heading.value
    if not 0.0 <= heading < 360.0:
        raise AssertionError(f"heading out of range: {heading}")


def main() -> None:
    atheris.Setup(sys.argv, test_one_input)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
