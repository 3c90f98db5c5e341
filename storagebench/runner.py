"""Оркестрация фаз бенчмарка"""

import random
from typing import Callable, Dict, Optional
from .auxiliary import bulk_file_benchmark, directory_benchmark
from .base import ResourceExhaustedError, StorageBackend
from .cache import drop_caches
from .config import BenchmarkConfig
from .executor import ParallelExecutor, mixed_step
from .filesystem import FilesystemBackend
from .metrics import LatencyAggregator
from .native_s3 import S3Backend
from .timing import PhaseTimer
from .workloads import generate_workload

BACKENDS = ('fs', 's3')


def make_backend(kind: str, config: BenchmarkConfig) -> StorageBackend:
    """Создание бэкенда по имени"""
    if kind == 'fs':
        return FilesystemBackend(config.dest, payload_kib=config.mix_size)
    if kind == 's3':
        return S3Backend(
            bucket=config.bucket,
            region=config.region,
            access_key=config.access_key,
            secret_key=config.secret_key,
            endpoint_url=config.endpoint,
            payload_kib=config.mix_size,
            tmp_dir=config.tmp,
        )
    raise ValueError(f"Unknown backend: {kind}")


class BenchmarkRunner:
    """Запуск включенных фаз: file, dir, mix"""

    def __init__(self, config: BenchmarkConfig, backend: StorageBackend,
                 drop_cache: Optional[Callable[[], bool]] = None,
                 out: Callable[[str], None] = print):
        self.config = config
        self.backend = backend
        self.drop_cache = drop_cache or drop_caches
        self.out = out
        self.timer = PhaseTimer(out=out)
        self.rng = random.Random(config.seed) if config.seed is not None else random.Random()

    def print_banner(self):
        config = self.config
        self.out("=" * 80)
        self.out("STORAGE BENCHMARK")
        self.out("=" * 80)
        self.out(f"Backend:      {self.backend.name}")
        if isinstance(self.backend, S3Backend):
            self.out(f"Bucket:       {config.bucket}")
            self.out(f"Endpoint:     {config.endpoint or 'default'}")
        else:
            self.out(f"Dest:         {config.dest}")
        self.out(f"Phases:       file={config.file} dir={config.dir} "
                 f"mix={config.mix} read={config.read}")
        self.out(f"Workers:      {config.thread} ({config.mode})")
        self.out("=" * 80)

    def run(self) -> Dict[str, object]:
        """Фаза с нулевым параметром пропускается"""
        config = self.config
        results = {}
        self.drop_cache()

        if config.file > 0:
            results['file'] = bulk_file_benchmark(
                self.backend, config.file, self.timer, self.drop_cache)

        if config.dir > 0:
            if isinstance(self.backend, FilesystemBackend):
                results['dir'] = directory_benchmark(
                    self.backend, config.dir, self.timer, self.drop_cache, self.rng)
            else:
                self.out(f"⚠️  Skipping dir: not supported by {self.backend.name}")

        if config.mix > 0:
            results['mix'] = self.mix_benchmark()

        return results

    def mix_benchmark(self) -> LatencyAggregator:
        config = self.config
        self.timer.header('mix')

        sequence = generate_workload(config.mix, config.read, self.rng)
        executor = ParallelExecutor(config.thread, config.mode)
        aggregator = LatencyAggregator()
        label = (f"read({config.read}) write(1) {config.mix_size}K * {config.mix} "
                 f"thread={config.thread}")

        with self.backend.session():
            self.drop_cache()
            try:
                with self.timer.report(label):
                    stats = executor.run(sequence, mixed_step, self.backend)
            except ResourceExhaustedError as e:
                if e.partial is not None:
                    aggregator.merge(e.partial)
                self.out("⚠️  Run aborted, partial results:")
                self.print_summary(aggregator)
                raise

        aggregator.merge(stats)
        self.print_summary(aggregator)
        return aggregator

    def print_summary(self, aggregator: LatencyAggregator):
        report = aggregator.report()
        for line in aggregator.summary_lines(report):
            self.out(line)
        latency = aggregator.latency_lines(report)
        if latency:
            self.out("")
            self.out("  Latency:")
            for line in latency:
                self.out(line)
