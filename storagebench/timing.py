"""Замер времени фаз бенчмарка: user / system / total / real"""

import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, List

LABEL_WIDTH = 40


def format_size(size_bytes):
    """Форматирование размера в человекочитаемый вид"""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} TB"


@dataclass
class PhaseTiming:
    """Время одной фазы"""
    label: str
    user: float
    system: float
    real: float

    @property
    def total(self) -> float:
        return self.user + self.system

    def format(self, width: int = LABEL_WIDTH) -> str:
        return (f"{self.label:<{width}}{self.user:>10.6f} {self.system:>10.6f} "
                f"{self.total:>10.6f} ({self.real:>10.6f})")


def _cpu_times():
    t = os.times()
    # дочерние процессы (стратегия process) тоже учитываются
    return t.user + t.children_user, t.system + t.children_system


class PhaseTimer:
    """Печатает строку с временем для каждого замера"""

    def __init__(self, out: Callable[[str], None] = print, width: int = LABEL_WIDTH):
        self.out = out
        self.width = width
        self.timings: List[PhaseTiming] = []

    def header(self, title: str):
        self.out("")
        self.out(title)
        self.out(" " * self.width + f"{'user':>10} {'system':>10} {'total':>10} {'real':>12}")

    @contextmanager
    def report(self, label: str):
        user_start, system_start = _cpu_times()
        real_start = time.perf_counter()
        try:
            yield
        finally:
            user_end, system_end = _cpu_times()
            timing = PhaseTiming(
                label=label,
                user=user_end - user_start,
                system=system_end - system_start,
                real=time.perf_counter() - real_start,
            )
            self.timings.append(timing)
            self.out(timing.format(self.width))
