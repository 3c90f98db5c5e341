"""Вспомогательные бенчмарки: последовательные файлы и дерево каталогов"""

import os
import random
from collections import deque
from pathlib import Path
from typing import Callable, Iterator, List, Optional
from .base import StorageBackend, exhaustion_guard
from .filesystem import FilesystemBackend
from .partition import partition, NAMESPACE, LEAF_NAME
from .timing import PhaseTimer, format_size

BLOCK_FLOOR_KIB = 10


def block_sizes(total_kib: int, floor_kib: int = BLOCK_FLOOR_KIB) -> List[int]:
    """Размеры блоков: total, total/10, ... пока не меньше floor"""
    sizes = []
    size = total_kib
    while size >= floor_kib and size > 0:
        sizes.append(size)
        size //= 10
    return sizes


def bulk_file_benchmark(backend: StorageBackend, total_kib: int, timer: PhaseTimer,
                        drop_cache: Callable[[], bool]) -> int:
    """
    Запись и чтение total_kib при убывающем размере файлов.

    Для каждого размера пишется total/size файлов, затем они читаются.
    Перед каждой фазой сбрасывается кэш. Возвращает число неудачных операций.
    """
    timer.header('file rw')
    failures = 0

    for size in block_sizes(total_kib):
        count = total_kib // size
        label = f"{format_size(size * 1024)} * {count}"
        names = [f"tmp.{size * 1024}.{i}" for i in range(count)]

        with backend.session():
            drop_cache()
            with timer.report(f"w {label}"):
                for name in names:
                    failures += not backend.write(name, size).succeeded

            drop_cache()
            with timer.report(f"r {label}"):
                for name in names:
                    failures += not backend.read(name).succeeded

    if failures:
        print(f"  ⚠️  {failures} file operations failed")
    return failures


def leaf_dir(root: Path, key: int) -> Path:
    return root.joinpath(NAMESPACE, *partition(key))


def create_dirs(root: Path, dir_count: int, rng: Optional[random.Random] = None):
    """Создание листовых каталогов в случайном порядке, в каждом пустой файл tmp"""
    root = Path(root)
    keys = list(range(1, dir_count + 1))
    (rng or random.Random()).shuffle(keys)
    for key in keys:
        leaf = leaf_dir(root, key)
        with exhaustion_guard("mkdir"):
            os.makedirs(leaf, exist_ok=True)
            (leaf / LEAF_NAME).touch()


def traverse(path) -> Iterator[str]:
    """Обход в ширину с явной очередью: файлы отдаются, каталоги ставятся в очередь"""
    frontier = deque([str(path)])
    while frontier:
        current = frontier.popleft()
        with os.scandir(current) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    frontier.append(entry.path)
                else:
                    yield entry.path


def directory_benchmark(backend: FilesystemBackend, dir_count: int, timer: PhaseTimer,
                        drop_cache: Callable[[], bool],
                        rng: Optional[random.Random] = None) -> int:
    """Создание dir_count каталогов и обход всего дерева. Возвращает число найденных листьев"""
    root = backend.root
    timer.header('dir')
    visited = 0

    with backend.session():
        drop_cache()
        with timer.report(f"create {dir_count} dirs"):
            create_dirs(root, dir_count, rng)

        drop_cache()
        with timer.report('traversal dirs'):
            for _ in traverse(root / NAMESPACE):
                visited += 1

    if visited != dir_count:
        print(f"  ⚠️  traversal found {visited} leaves, expected {dir_count}")
    return visited
