"""
Storage Benchmark Tool
Сравнение файловой системы и S3: последовательные файлы, каталоги, смешанная нагрузка
"""
import argparse
import sys

from .base import ResourceExhaustedError
from .config import BenchmarkConfig, parse_option
from .runner import BACKENDS, BenchmarkRunner, make_backend


def option(token: str):
    try:
        return parse_option(token)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='storagebench',
        description='Storage Benchmark Tool',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Options (key=value, any order):
  dest=DIR         filesystem root (default ./tmp/)
  file=KIB         total KiB for sequential file read/write (0 disables)
  dir=N            number of directories to create and traverse (0 disables)
  mix=N            key population for mixed workload (0 disables), alias count
  read=R           reads per key in mixed workload
  thread=T         number of workers
  mode=MODE        thread or process
  mix_size=KIB     put payload size, alias size
  seed=N           shuffle seed
  bucket, region, id, secret, tmp, endpoint   S3 settings

Examples:
  # Filesystem, all phases
  python3 -m storagebench fs dest=/mnt/disk/tmp file=102400 dir=10000 mix=1000 read=10

  # MinIO, 8 threads
  python3 -m storagebench s3 bucket=benchmark endpoint=http://localhost:9000 \\
      mix=1000 read=10 thread=8
        """
    )
    parser.add_argument('backend', choices=BACKENDS,
                        help='Storage backend to benchmark')
    parser.add_argument('options', nargs='*', type=option, metavar='key=value',
                        help='Benchmark options')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = BenchmarkConfig.from_options(dict(args.options))
    except ValueError as e:
        parser.error(str(e))

    runner = BenchmarkRunner(config, make_backend(args.backend, config))
    runner.print_banner()

    try:
        runner.run()
    except ResourceExhaustedError as e:
        print(f"❌ Resource exhausted: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130

    print("\n" + "=" * 80)
    print("✅ BENCHMARK COMPLETED")
    print("=" * 80)
    return 0


if __name__ == '__main__':
    sys.exit(main())
