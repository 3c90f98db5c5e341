"""Конфигурация прогона"""

import os
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple
from .executor import Strategy

INT_PREFIX = re.compile(r"\s*([-+]?\d+)")


def to_int(value: Optional[str], default: int = 0) -> int:
    """
    Целое из начала строки: "12abc" -> 12, "abc" -> 0.

    Некорректное значение дает 0 и тем самым выключает фазу.
    """
    if value is None:
        return default
    match = INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else 0


def parse_option(token: str) -> Tuple[str, str]:
    """Разбор аргумента вида key=value"""
    key, sep, value = token.partition("=")
    if not sep or not key:
        raise ValueError(f"expected key=value, got {token!r}")
    return key.strip(), value


def collect_options(tokens: Iterable[str]) -> Dict[str, str]:
    """Порядок не важен, при повторе побеждает последний"""
    return dict(parse_option(token) for token in tokens)


@dataclass(frozen=True)
class BenchmarkConfig:
    """Неизменяемая конфигурация, передается компонентам явно"""
    dest: str = './tmp/'
    file: int = 0
    dir: int = 0
    mix: int = 0
    read: int = 0
    thread: int = 1
    mix_size: int = 100
    mode: str = Strategy.THREAD
    seed: Optional[int] = None

    # Объектное хранилище
    bucket: str = 'storagebench-test'
    region: str = 'ap-northeast-2'
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    tmp: str = '/tmp'
    endpoint: Optional[str] = None

    @classmethod
    def from_options(cls, options: Dict[str, str]) -> "BenchmarkConfig":
        thread = to_int(options.get('thread'), 1)
        mode = options.get('mode', Strategy.THREAD)
        if mode not in Strategy.ALL:
            raise ValueError(f"mode must be one of {', '.join(Strategy.ALL)}, got {mode!r}")

        return cls(
            dest=options.get('dest', cls.dest),
            file=to_int(options.get('file')),
            dir=to_int(options.get('dir')),
            mix=to_int(options.get('mix', options.get('count'))),
            read=to_int(options.get('read')),
            thread=thread if thread > 0 else 1,
            mix_size=to_int(options.get('mix_size', options.get('size')), 100),
            mode=mode,
            seed=to_int(options['seed']) if 'seed' in options else None,
            bucket=options.get('bucket', cls.bucket),
            region=options.get('region', cls.region),
            access_key=options.get('id', os.getenv('AWS_ACCESS_KEY_ID')),
            secret_key=options.get('secret', os.getenv('AWS_SECRET_ACCESS_KEY')),
            tmp=options.get('tmp', cls.tmp),
            endpoint=options.get('endpoint'),
        )
