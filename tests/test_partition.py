import pytest
from hypothesis import given, settings
import hypothesis.strategies as st

from storagebench.partition import partition, unpartition, object_path

keys = st.integers(min_value=0, max_value=10 ** 10 - 1)


def test_partition_seven():
    assert partition(7) == ["00", "00", "00", "00", "07"]


def test_partition_large_key():
    assert partition(1234567890) == ["12", "34", "56", "78", "90"]


def test_partition_fan_out_is_bounded():
    """Every segment is two digits, so at most 100 children per level."""
    segments = {tuple(partition(k))[-1] for k in range(1, 1000)}
    assert len(segments) == 100


def test_object_path_layout():
    assert object_path(7) == "dirs/00/00/00/00/07/tmp"
    assert object_path(7, namespace="", leaf="") == "00/00/00/00/07"


@pytest.mark.parametrize("key", [-1, 10 ** 10])
def test_partition_rejects_out_of_range(key):
    with pytest.raises(ValueError):
        partition(key)


def test_partition_rejects_uneven_width():
    with pytest.raises(ValueError):
        partition(5, width=5, group=2)


def test_partition_is_injective_over_small_range():
    paths = {tuple(partition(k)) for k in range(1, 5001)}
    assert len(paths) == 5000


@given(key=keys)
@settings(max_examples=200)
def test_roundtrip_recovers_padded_key(key):
    segments = partition(key)
    assert "".join(segments) == f"{key:010d}"
    assert unpartition(segments) == key


@given(k1=keys, k2=keys)
@settings(max_examples=200)
def test_distinct_keys_map_to_distinct_paths(k1, k2):
    if k1 != k2:
        assert partition(k1) != partition(k2)
    else:
        assert partition(k1) == partition(k2)
