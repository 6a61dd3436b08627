"""Per-job stage timing with spans."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass

from litquery.observability.metrics import log_stage_latency


@dataclass
class Span:
    name: str
    start_ms: float
    end_ms: float = 0.0

    @property
    def duration_ms(self) -> float:
        return self.end_ms - self.start_ms


class JobTrace:
    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        self.spans: list[Span] = []
        self.start_time = time.monotonic()

    @contextmanager
    def span(self, name: str):
        s = Span(name=name, start_ms=self.elapsed_ms)
        try:
            yield s
        finally:
            s.end_ms = self.elapsed_ms
            self.spans.append(s)
            log_stage_latency(self.job_id, name, s.duration_ms)

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start_time) * 1000
