"""Исполнение смешанной нагрузки в несколько потоков или процессов"""

from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor, as_completed
from typing import Callable, List, Sequence
from .base import OperationResult, ResourceExhaustedError, StorageBackend
from .metrics import AggregateStats, LatencyAggregator
from .partition import object_path

Record = Callable[[OperationResult], None]
Step = Callable[[StorageBackend, int, Record], None]


class Strategy:
    """Способы распараллеливания"""
    THREAD = "thread"
    PROCESS = "process"

    ALL = (THREAD, PROCESS)


def mixed_step(backend: StorageBackend, key: int, record: Record):
    """
    Один шаг смешанной нагрузки: head, затем get или put.

    Блокировки по ключу нет: два воркера могут одновременно не найти
    объект и оба сделать put. Это часть измеряемой нагрузки.
    """
    path = object_path(key)
    existence = backend.head(path)
    record(existence)
    if existence.succeeded:
        record(backend.get(path))
    else:
        record(backend.put(path))


def split_ranges(length: int, workers: int) -> List[range]:
    """Непересекающиеся непрерывные диапазоны индексов, покрывающие всю последовательность"""
    workers = max(1, min(workers, length))
    base, extra = divmod(length, workers)
    ranges = []
    start = 0
    for i in range(workers):
        stop = start + base + (1 if i < extra else 0)
        if stop > start:
            ranges.append(range(start, stop))
        start = stop
    return ranges


def run_share(step: Step, backend: StorageBackend, items: Sequence[int]) -> AggregateStats:
    """Работа отдельного процесса: свой бэкенд, свой буфер результатов"""
    aggregator = LatencyAggregator()
    try:
        for item in items:
            step(backend, item, aggregator.record)
    except ResourceExhaustedError as e:
        e.partial = aggregator.snapshot()
        raise
    return aggregator.snapshot()


class ParallelExecutor:
    """Пул воркеров фиксированного размера поверх неизменяемой последовательности"""

    def __init__(self, workers: int = 1, strategy: str = Strategy.THREAD):
        if strategy not in Strategy.ALL:
            raise ValueError(f"Unknown strategy: {strategy}")
        self.workers = max(1, workers)
        self.strategy = strategy

    def run(self, sequence: Sequence[int], step: Step,
            backend: StorageBackend) -> AggregateStats:
        """Каждый элемент обрабатывается ровно один раз"""
        aggregator = LatencyAggregator()
        if self.workers == 1 or len(sequence) <= 1:
            try:
                for item in sequence:
                    step(backend, item, aggregator.record)
            except ResourceExhaustedError as e:
                e.partial = aggregator.snapshot()
                raise
            return aggregator.snapshot()

        shares = split_ranges(len(sequence), self.workers)
        if self.strategy == Strategy.THREAD:
            self._run_threads(sequence, shares, step, backend, aggregator)
        else:
            self._run_processes(sequence, shares, step, backend, aggregator)
        return aggregator.snapshot()

    def _run_threads(self, sequence, shares, step, backend, aggregator):
        def worker(share: range):
            for i in share:
                step(backend, sequence[i], aggregator.record)

        with ThreadPoolExecutor(max_workers=len(shares)) as pool:
            futures = [pool.submit(worker, share) for share in shares]
            self._wait(futures, aggregator, merge=False)

    def _run_processes(self, sequence, shares, step, backend, aggregator):
        with ProcessPoolExecutor(max_workers=len(shares)) as pool:
            futures = [
                pool.submit(run_share, step, backend, tuple(sequence[share.start:share.stop]))
                for share in shares
            ]
            self._wait(futures, aggregator, merge=True)

    @staticmethod
    def _wait(futures, aggregator: LatencyAggregator, merge: bool):
        """Ждем всех воркеров; первая нехватка ресурсов пробрасывается в конце"""
        error = None
        for future in as_completed(futures):
            try:
                stats = future.result()
            except ResourceExhaustedError as e:
                if merge and e.partial is not None:
                    aggregator.merge(e.partial)
                error = error or e
                continue
            if merge:
                aggregator.merge(stats)
        if error is not None:
            error.partial = aggregator.snapshot()
            raise error
