"""Шардирование ключей по иерархии каталогов"""

from typing import List, Sequence

KEY_WIDTH = 10
SEGMENT_WIDTH = 2
NAMESPACE = "dirs"
LEAF_NAME = "tmp"


def partition(key: int, width: int = KEY_WIDTH, group: int = SEGMENT_WIDTH) -> List[str]:
    """
    Разбивает ключ на сегменты пути фиксированной ширины.

    Ключ дополняется нулями до `width` цифр и режется на группы по `group`
    символов: partition(7) -> ["00", "00", "00", "00", "07"].
    На каждом уровне получается не больше 10**group потомков.
    """
    if width % group:
        raise ValueError(f"width {width} is not a multiple of group {group}")
    if key < 0 or key >= 10 ** width:
        raise ValueError(f"key {key} does not fit into {width} digits")

    digits = f"{key:0{width}d}"
    return [digits[i:i + group] for i in range(0, width, group)]


def unpartition(segments: Sequence[str]) -> int:
    """Обратное преобразование: сегменты -> ключ"""
    return int("".join(segments))


def object_path(key: int, namespace: str = NAMESPACE, leaf: str = LEAF_NAME) -> str:
    """Путь объекта для ключа: dirs/XX/XX/XX/XX/XX/tmp"""
    parts = partition(key)
    if namespace:
        parts = [namespace] + parts
    if leaf:
        parts.append(leaf)
    return "/".join(parts)
