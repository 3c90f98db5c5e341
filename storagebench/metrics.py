"""Сбор и обработка метрик"""

import copy
import random
import threading
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
from .base import OperationResult
from .workloads import OperationKind

# Сколько задержек хранится для перцентилей, счетчики при этом точные
SAMPLE_LIMIT = 10000


@dataclass
class KindStats:
    """
    Счетчики для одного типа операций.

    samples - равномерная выборка (reservoir sampling) не больше
    sample_limit задержек, count и total_elapsed считаются по всем вызовам.
    """
    count: int = 0
    total_elapsed: float = 0.0
    failed: int = 0
    samples: List[float] = field(default_factory=list)
    sample_limit: int = SAMPLE_LIMIT

    def add(self, result: OperationResult):
        self.count += 1
        self.total_elapsed += result.elapsed
        if len(self.samples) < self.sample_limit:
            self.samples.append(result.elapsed)
        else:
            slot = random.randrange(self.count)
            if slot < self.sample_limit:
                self.samples[slot] = result.elapsed
        if not result.succeeded:
            self.failed += 1

    def merge(self, other: "KindStats"):
        self.samples = self._merge_samples(other)
        self.count += other.count
        self.total_elapsed += other.total_elapsed
        self.failed += other.failed

    def _merge_samples(self, other: "KindStats") -> List[float]:
        """Объединение выборок пропорционально числу операций с каждой стороны"""
        if len(self.samples) + len(other.samples) <= self.sample_limit:
            return self.samples + other.samples
        total = self.count + other.count
        own = min(len(self.samples), round(self.sample_limit * self.count / total))
        theirs = min(len(other.samples), self.sample_limit - own)
        return random.sample(self.samples, own) + random.sample(other.samples, theirs)

    @property
    def throughput(self) -> Optional[float]:
        """Операций в секунду; None, если операций не было"""
        if self.count == 0 or self.total_elapsed <= 0:
            return None
        return self.count / self.total_elapsed


@dataclass
class AggregateStats:
    """
    Свертка результатов по типам операций.

    Свертка коммутативна и ассоциативна, поэтому порядок прихода
    результатов от воркеров не важен.
    """
    kinds: Dict[str, KindStats] = field(default_factory=dict)

    @classmethod
    def fold(cls, results: Iterable[OperationResult]) -> "AggregateStats":
        stats = cls()
        for result in results:
            stats.add(result)
        return stats

    def add(self, result: OperationResult):
        self.kinds.setdefault(result.kind, KindStats()).add(result)

    def merge(self, other: "AggregateStats") -> "AggregateStats":
        for kind, kind_stats in other.kinds.items():
            self.kinds.setdefault(kind, KindStats()).merge(kind_stats)
        return self

    def get(self, kind: str) -> KindStats:
        return self.kinds.get(kind) or KindStats()

    def count(self, kind: str) -> int:
        return self.get(kind).count


class LatencyAggregator:
    """Потокобезопасный сборщик результатов операций"""

    def __init__(self):
        self._stats = AggregateStats()
        self._lock = threading.Lock()

    def record(self, result: OperationResult):
        with self._lock:
            self._stats.add(result)

    def merge(self, stats: AggregateStats):
        with self._lock:
            self._stats.merge(stats)

    def snapshot(self) -> AggregateStats:
        with self._lock:
            return copy.deepcopy(self._stats)

    def report(self) -> Dict[str, dict]:
        """Итоговая статистика по каждому типу операций"""
        stats = self.snapshot()
        kinds = list(OperationKind.ALL) + [k for k in stats.kinds if k not in OperationKind.ALL]

        report = {}
        for kind in kinds:
            kind_stats = stats.get(kind)
            entry = {
                'count': kind_stats.count,
                'total_elapsed': kind_stats.total_elapsed,
                'failed': kind_stats.failed,
                'throughput': kind_stats.throughput,
                'latency_avg_ms': None,
                'latency_p95_ms': None,
                'latency_p99_ms': None,
            }
            if kind_stats.samples:
                latencies = np.array(kind_stats.samples) * 1000  # в миллисекунды
                entry['latency_avg_ms'] = kind_stats.total_elapsed / kind_stats.count * 1000
                entry['latency_p95_ms'] = float(np.percentile(latencies, 95))
                entry['latency_p99_ms'] = float(np.percentile(latencies, 99))
            report[kind] = entry
        return report

    def summary_lines(self, report: Optional[Dict[str, dict]] = None) -> List[str]:
        """Строки вида 'head count: 500, time: 0.01, average 50000.0'"""
        report = report or self.report()
        lines = []
        for kind in OperationKind.ALL:
            entry = report[kind]
            average = entry['throughput']
            average_text = f"{average:.2f}" if average is not None else "n/a"
            lines.append(f"{kind} count: {entry['count']}, "
                         f"time: {entry['total_elapsed']:.6f}, average {average_text}")
        return lines

    def latency_lines(self, report: Optional[Dict[str, dict]] = None) -> List[str]:
        report = report or self.report()
        lines = []
        for kind in OperationKind.ALL:
            entry = report[kind]
            if entry['latency_avg_ms'] is None:
                continue
            # для head неуспех означает отсутствие объекта
            label = "absent" if kind == OperationKind.HEAD else "failed"
            lines.append(f"    {kind:5} avg {entry['latency_avg_ms']:>10.3f} ms  "
                         f"p95 {entry['latency_p95_ms']:>10.3f} ms  "
                         f"p99 {entry['latency_p99_ms']:>10.3f} ms  "
                         f"{label} {entry['failed']}")
        return lines
