#!/usr/bin/env python3
"""Caller-thread overhead benchmark.

Measures the cost a debug call adds to the calling thread:
  1. debug() while disabled  (config check only)
  2. build()                 (caller lookup + memory stats + metadata)
  3. encode_envelope()       (JSON reduction + serialization)
  4. debug() fire-and-forget (build + encode + thread handoff, no network)

Usage:
    python benchmarks/bench_overhead.py
"""

from __future__ import annotations

import time

import httpx

import momolog
import momolog._sdk as sdk_mod
from momolog._config import MomologConfig
from momolog._encoding import encode_envelope
from momolog._payload import build

_VALUE = {"user_id": 42, "roles": ["admin", "editor"], "profile": {"active": True}}


def _install(config: MomologConfig) -> sdk_mod._Debugger:
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    debugger = sdk_mod._Debugger(config, transport=transport)
    sdk_mod._debugger_instance = debugger
    return debugger


def bench_disabled(iterations: int = 500_000) -> float:
    """Benchmark: debug() with sending disabled."""
    _install(MomologConfig(enabled=False))
    try:
        # Warmup
        for _ in range(5000):
            momolog.debug(_VALUE)

        start = time.perf_counter_ns()
        for _ in range(iterations):
            momolog.debug(_VALUE)
        elapsed = time.perf_counter_ns() - start

        return elapsed / iterations
    finally:
        momolog.shutdown()


def bench_build(iterations: int = 50_000) -> float:
    """Benchmark: envelope construction only."""
    # Warmup
    for _ in range(1000):
        build(_VALUE, "bench")

    start = time.perf_counter_ns()
    for _ in range(iterations):
        build(_VALUE, "bench")
    elapsed = time.perf_counter_ns() - start

    return elapsed / iterations


def bench_encode(iterations: int = 100_000) -> float:
    """Benchmark: envelope serialization only."""
    envelope = build(_VALUE, "bench")

    # Warmup
    for _ in range(1000):
        encode_envelope(envelope)

    start = time.perf_counter_ns()
    for _ in range(iterations):
        encode_envelope(envelope)
    elapsed = time.perf_counter_ns() - start

    return elapsed / iterations


def bench_fire_and_forget(iterations: int = 2_000) -> float:
    """Benchmark: enabled debug() in async mode against a mock transport."""
    debugger = _install(MomologConfig(enabled=True, async_mode=True))
    try:
        # Warmup
        for _ in range(100):
            momolog.debug(_VALUE)
        debugger.emitter.flush(timeout=5.0)

        start = time.perf_counter_ns()
        for _ in range(iterations):
            momolog.debug(_VALUE)
        elapsed = time.perf_counter_ns() - start

        debugger.emitter.flush(timeout=5.0)
        return elapsed / iterations
    finally:
        momolog.shutdown()


def main() -> None:
    print("=" * 60)
    print("MomoLog Caller Overhead Benchmark")
    print("=" * 60)

    results: list[tuple[str, float, str]] = []

    # 1. Disabled
    ns = bench_disabled()
    target = "< 1μs"
    status = "PASS" if ns < 1000 else "WARN" if ns < 5000 else "FAIL"
    results.append(("debug() disabled", ns, f"{status} (target {target})"))

    # 2. Envelope build
    ns = bench_build()
    target = "< 50μs"
    status = "PASS" if ns < 50_000 else "WARN" if ns < 100_000 else "FAIL"
    results.append(("build() envelope", ns, f"{status} (target {target})"))

    # 3. Encoding
    ns = bench_encode()
    target = "< 20μs"
    status = "PASS" if ns < 20_000 else "WARN" if ns < 50_000 else "FAIL"
    results.append(("encode_envelope()", ns, f"{status} (target {target})"))

    # 4. Fire-and-forget
    ns = bench_fire_and_forget()
    target = "< 500μs"
    status = "PASS" if ns < 500_000 else "WARN" if ns < 1_000_000 else "FAIL"
    results.append(("debug() fire-and-forget", ns, f"{status} (target {target})"))

    print()
    for name, ns_val, note in results:
        if ns_val >= 1000:
            display = f"{ns_val / 1000:.2f}μs"
        else:
            display = f"{ns_val:.0f}ns"
        print(f"  {name:40s}  {display:>10s}   {note}")

    print()
    all_pass = all("PASS" in r[2] or "WARN" in r[2] for r in results)
    if all_pass:
        print("All benchmarks within acceptable range.")
    else:
        print("WARNING: Some benchmarks exceeded target. Review above.")


if __name__ == "__main__":
    main()
