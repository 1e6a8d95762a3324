import pytest

from chtypes.string_pool import StringPool


def test_allocate():
    pool = StringPool(10)
    for i in range(1, 1000):
        buffer = pool.allocate(i)
        assert len(buffer) == i
        assert buffer[0] == 0
        buffer[0] = 1


def test_get():
    pool = StringPool(10)
    for i in range(1000):
        s = f"text-{i}".encode()
        buffer = pool.allocate(len(s))
        assert len(buffer) == len(s)
        buffer[:] = s

    for i in range(1000):
        assert pool.get(i).decode() == f"text-{i}"


def test_len_counts_strings():
    pool = StringPool(2)
    pool.allocate(3)
    pool.allocate(0)
    assert len(pool) == 2


def test_from_strings_round_trip():
    source = [b"alpha", "beta", b"", "gamma"]
    pool = StringPool.from_strings(source)
    assert list(pool.strings()) == [b"alpha", b"beta", b"", b"gamma"]


def test_large_string_gets_own_chunk():
    pool = StringPool(1)
    pool.allocate(5)[:] = b"small"
    pool.allocate(100)[:] = b"x" * 100
    assert pool.get(0) == b"small"
    assert pool.get(1) == b"x" * 100


def test_get_out_of_range():
    pool = StringPool.from_strings([b"one"])
    with pytest.raises(IndexError):
        pool.get(1)


def test_negative_size():
    with pytest.raises(ValueError):
        StringPool(1).allocate(-1)