"""Storage Benchmark Framework"""

from .base import OperationResult, ResourceExhaustedError, StorageBackend
from .filesystem import FilesystemBackend
from .native_s3 import S3Backend
from .partition import partition, unpartition, object_path
from .workloads import OperationKind, generate_workload
from .executor import ParallelExecutor, Strategy, mixed_step
from .metrics import AggregateStats, LatencyAggregator
from .config import BenchmarkConfig
from .runner import BenchmarkRunner, make_backend

__all__ = [
    'OperationResult',
    'ResourceExhaustedError',
    'StorageBackend',
    'FilesystemBackend',
    'S3Backend',
    'partition',
    'unpartition',
    'object_path',
    'OperationKind',
    'generate_workload',
    'ParallelExecutor',
    'Strategy',
    'mixed_step',
    'AggregateStats',
    'LatencyAggregator',
    'BenchmarkConfig',
    'BenchmarkRunner',
    'make_backend'
]
