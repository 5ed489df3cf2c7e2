"""Benchmark helper for per-keystroke direction reconciliation latency."""
from __future__ import annotations

import argparse
import statistics
from dataclasses import dataclass
from time import perf_counter
from typing import Iterable, Sequence

from textdirection.direction.extension import TextDirection
from textdirection.editor.document_model import Node, doc, node
from textdirection.editor.editor import Editor
from textdirection.services.settings import TextDirectionOptions
from textdirection.utils.telemetry import TelemetryClient

_SAMPLES = ("The quick brown fox", "שלום עולם", "مرحبا بالعالم", "12:30 - 42")


@dataclass(slots=True)
class BenchmarkResult:
    label: str
    paragraphs: int
    keystrokes: int
    runtimes_ms: list[float]
    reconciliations: int

    @property
    def median_ms(self) -> float:
        return statistics.median(self.runtimes_ms)

    @property
    def max_ms(self) -> float:
        return max(self.runtimes_ms)


def _build_document(paragraphs: int) -> Node:
    blocks = [node("paragraph", _SAMPLES[index % len(_SAMPLES)]) for index in range(paragraphs)]
    blocks.append(node("paragraph"))
    return doc(*blocks)


def _run_case(label: str, paragraphs: int, keystrokes: int, *, enabled: bool) -> BenchmarkResult:
    telemetry = TelemetryClient(enabled=False)
    extensions = []
    if enabled:
        options = TextDirectionOptions(types=frozenset({"paragraph"}))
        extensions.append(TextDirection(options, telemetry=telemetry))
    editor = Editor(_build_document(paragraphs), extensions=extensions)
    caret = editor.doc.content_size - 1
    runtimes: list[float] = []
    for index in range(keystrokes):
        character = "ש" if index % 2 else "a"
        start = perf_counter()
        editor.insert_text(character, caret)
        runtimes.append((perf_counter() - start) * 1000)
        caret += 1
    reconciliations = telemetry.counts().get("text_direction.reconciled", 0)
    return BenchmarkResult(label, paragraphs, keystrokes, runtimes, reconciliations)


def run_benchmarks(sizes: Iterable[int], *, keystrokes: int) -> list[BenchmarkResult]:
    results: list[BenchmarkResult] = []
    for size in sizes:
        results.append(_run_case(f"{size} paragraphs (baseline)", size, keystrokes, enabled=False))
        results.append(_run_case(f"{size} paragraphs", size, keystrokes, enabled=True))
    return results


def _parse_sizes(raw: Sequence[str] | None) -> list[int]:
    if not raw:
        return [10, 100, 1000]
    return [max(1, int(value)) for value in raw]


def main() -> None:
    parser = argparse.ArgumentParser(description="Measure text direction reconciliation latency per keystroke.")
    parser.add_argument(
        "--paragraphs",
        action="append",
        metavar="COUNT",
        help="Document size in paragraphs; can be supplied multiple times.",
    )
    parser.add_argument("--keystrokes", type=int, default=200, help="Characters typed per case.")
    parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON results.")
    args = parser.parse_args()

    results = run_benchmarks(_parse_sizes(args.paragraphs), keystrokes=max(1, args.keystrokes))

    if args.json:
        import json

        payload = [
            {
                "label": result.label,
                "paragraphs": result.paragraphs,
                "keystrokes": result.keystrokes,
                "median_ms": result.median_ms,
                "max_ms": result.max_ms,
                "reconciliations": result.reconciliations,
            }
            for result in results
        ]
        print(json.dumps(payload, indent=2))
        return

    max_label = max(len(result.label) for result in results)
    header = f"{'Document':<{max_label}}  Keystrokes  Median (ms)  Max (ms)  Reconciled"
    print(header)
    print("-" * len(header))
    for result in results:
        print(
            f"{result.label:<{max_label}}  "
            f"{result.keystrokes:>10,}  "
            f"{result.median_ms:>11.3f}  "
            f"{result.max_ms:>8.3f}  "
            f"{result.reconciliations:>10,}"
        )


if __name__ == "__main__":
    main()
