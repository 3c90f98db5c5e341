"""Бэкенд для локальной файловой системы"""

import os
import shutil
from pathlib import Path
from .base import StorageBackend, CHUNK_SIZE

BUFFER = bytes(CHUNK_SIZE)


def write_chunks(path, size_kib: int):
    """Запись size_kib блоков по 1 KB"""
    with open(path, 'wb') as f:
        for _ in range(size_kib):
            f.write(BUFFER)


def read_chunks(path) -> int:
    """Чтение блоками по 1 KB до короткого чтения"""
    total = 0
    with open(path, 'rb') as f:
        while True:
            chunk = f.read(CHUNK_SIZE)
            total += len(chunk)
            if len(chunk) < CHUNK_SIZE:
                break
    return total


class FilesystemBackend(StorageBackend):
    """Бэкенд поверх каталога dest"""

    name = "filesystem"

    def __init__(self, root: str, payload_kib: int = 100):
        super().__init__(payload_kib)
        self.root = Path(root)

    def resolve(self, path: str) -> Path:
        return self.root / path

    def setup(self):
        """Пересоздание корневого каталога"""
        shutil.rmtree(self.root, ignore_errors=True)
        self.root.mkdir(parents=True, exist_ok=True)

    def teardown(self):
        """Очистка содержимого корня, сам каталог остается"""
        if not self.root.exists():
            return
        for entry in self.root.iterdir():
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                print(f"  Cleanup warning: {e}")

    def _head(self, path: str) -> bool:
        return self.resolve(path).is_file()

    def _get(self, path: str):
        read_chunks(self.resolve(path))

    def _put(self, path: str):
        target = self.resolve(path)
        # Несколько потоков могут создавать один каталог одновременно
        os.makedirs(target.parent, exist_ok=True)
        write_chunks(target, self.payload_kib)

    def _write(self, path: str, size_kib: int):
        write_chunks(self.resolve(path), size_kib)

    def _read(self, path: str):
        read_chunks(self.resolve(path))
