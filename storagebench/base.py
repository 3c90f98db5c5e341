"""Базовые классы для бэкендов хранилища"""

import errno
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable

CHUNK_SIZE = 1024  # 1 KB

# Ошибки, при которых продолжать прогон бессмысленно
EXHAUSTION_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class ResourceExhaustedError(Exception):
    """Закончилось место на диске или память - прогон должен остановиться"""

    def __init__(self, message: str, partial=None):
        super().__init__(message)
        self.partial = partial

    def __reduce__(self):
        # partial должен пережить передачу из процесса-воркера
        return (self.__class__, (str(self), self.partial))


@dataclass(frozen=True)
class OperationResult:
    """Результат одного вызова бэкенда"""
    kind: str
    succeeded: bool
    elapsed: float


@contextmanager
def exhaustion_guard(kind: str):
    """Нехватка места и памяти превращается в ResourceExhaustedError, остальное пробрасывается как есть"""
    try:
        yield
    except MemoryError as e:
        raise ResourceExhaustedError(f"{kind}: out of memory") from e
    except OSError as e:
        if e.errno in EXHAUSTION_ERRNOS:
            raise ResourceExhaustedError(f"{kind}: {e}") from e
        raise


def timed(kind: str, operation: Callable[[], object]) -> OperationResult:
    """
    Замер времени вокруг вызова с перехватом ошибок.

    Любое исключение превращается в succeeded=False, время до сбоя
    все равно учитывается. Нехватка места и памяти пробрасывается
    как ResourceExhaustedError.
    """
    start = time.perf_counter()
    try:
        with exhaustion_guard(kind):
            outcome = operation()
    except ResourceExhaustedError:
        raise
    except Exception:
        return OperationResult(kind, False, time.perf_counter() - start)

    elapsed = time.perf_counter() - start
    # head возвращает факт существования, остальные операции - None
    succeeded = outcome if isinstance(outcome, bool) else True
    return OperationResult(kind, succeeded, elapsed)


class StorageBackend(ABC):
    """Общий интерфейс для файловой системы и объектного хранилища"""

    name = "backend"

    def __init__(self, payload_kib: int = 100):
        self.payload_kib = payload_kib

    @abstractmethod
    def setup(self):
        """Подготовка пустого пространства имен"""
        pass

    @abstractmethod
    def teardown(self):
        """Удаление всего, что создал прогон"""
        pass

    @contextmanager
    def session(self):
        self.setup()
        try:
            yield self
        finally:
            self.teardown()

    def head(self, path: str) -> OperationResult:
        return timed("head", lambda: self._head(path))

    def get(self, path: str) -> OperationResult:
        return timed("get", lambda: self._get(path))

    def put(self, path: str) -> OperationResult:
        return timed("put", lambda: self._put(path))

    def write(self, path: str, size_kib: int) -> OperationResult:
        return timed("write", lambda: self._write(path, size_kib))

    def read(self, path: str) -> OperationResult:
        return timed("read", lambda: self._read(path))

    @abstractmethod
    def _head(self, path: str) -> bool:
        """Проверка существования без передачи данных"""
        pass

    @abstractmethod
    def _get(self, path: str):
        pass

    @abstractmethod
    def _put(self, path: str):
        pass

    @abstractmethod
    def _write(self, path: str, size_kib: int):
        pass

    @abstractmethod
    def _read(self, path: str):
        pass
