"""Генерация смешанной нагрузки"""

import random
from typing import Optional, Tuple


class OperationKind:
    """Типы операций смешанной нагрузки"""
    HEAD = "head"
    GET = "get"
    PUT = "put"

    ALL = (HEAD, GET, PUT)


def generate_workload(population: int, read_multiplier: int,
                      rng: Optional[random.Random] = None) -> Tuple[int, ...]:
    """
    Последовательность ключей для смешанной нагрузки.

    Каждый ключ из [1, population] встречается read_multiplier + 1 раз:
    одна возможность записи и read_multiplier чтений. Порядок случайный,
    чтобы не было локальности доступа.
    """
    population = max(0, population)
    read_multiplier = max(0, read_multiplier)
    rng = rng or random.Random()

    keys = list(range(1, population + 1)) * (read_multiplier + 1)
    rng.shuffle(keys)
    return tuple(keys)
