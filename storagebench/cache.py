"""Сброс страничного кэша ОС перед замерами"""

import subprocess

DROP_CACHES_COMMAND = ["sudo", "-n", "sh", "-c", "sync; echo 3 > /proc/sys/vm/drop_caches"]


def drop_caches() -> bool:
    """
    Best-effort сброс кэша, нужны права root.

    Без прав ничего не делает и возвращает False: бенчмарк должен
    работать и без привилегий, просто результаты будут включать кэш.
    """
    try:
        completed = subprocess.run(
            DROP_CACHES_COMMAND,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        return False
    return completed.returncode == 0
