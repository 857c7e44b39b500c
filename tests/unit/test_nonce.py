import threading

import pytest

from maicoin_max.errors import ClockError
from maicoin_max.nonce import NonceSource, wall_clock_ms
from tests.unit.conftest import CLOCK_START_MS, SteppingClock


def test_wall_clock_nonces_strictly_increase():
    source = NonceSource()
    nonces = [source.next() for _ in range(1000)]

    assert all(b > a for a, b in zip(nonces, nonces[1:]))
    assert source.last == nonces[-1]


def test_wall_clock_nonce_is_milliseconds():
    before = wall_clock_ms()
    nonce = NonceSource().next()
    after = wall_clock_ms()

    assert before <= nonce <= after + 1


def test_frozen_clock_advances_from_last_nonce():
    source = NonceSource(SteppingClock())

    assert [source.next() for _ in range(3)] == [
        CLOCK_START_MS,
        CLOCK_START_MS + 1,
        CLOCK_START_MS + 2,
    ]


def test_regressing_clock_never_repeats_a_nonce():
    readings = iter([5000, 4000, 4999, 5000, 6000])
    source = NonceSource(lambda: next(readings))

    assert [source.next() for _ in range(5)] == [5000, 5001, 5002, 5003, 6000]


def test_clock_ahead_of_last_nonce_is_used_as_is():
    source = NonceSource(SteppingClock(step=250))

    assert [source.next() for _ in range(3)] == [
        CLOCK_START_MS,
        CLOCK_START_MS + 250,
        CLOCK_START_MS + 500,
    ]


def test_last_is_zero_before_first_nonce():
    assert NonceSource(SteppingClock()).last == 0


def test_failing_clock_raises_clock_error():
    def broken_clock() -> int:
        raise OSError("clock_gettime failed")

    source = NonceSource(broken_clock)

    with pytest.raises(ClockError) as exc_info:
        source.next()

    assert "clock_gettime failed" in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, OSError)


@pytest.mark.parametrize("reading", [-1, 1.5, None, True, "1700000000000"])
def test_unusable_clock_reading_raises_clock_error(reading):
    source = NonceSource(lambda: reading)

    with pytest.raises(ClockError):
        source.next()

    assert source.last == 0


def test_concurrent_callers_receive_distinct_nonces():
    # every thread hammers the same frozen millisecond
    source = NonceSource(SteppingClock())
    results: list[list[int]] = [[] for _ in range(8)]
    barrier = threading.Barrier(len(results))

    def draw(out: list[int]) -> None:
        barrier.wait()
        for _ in range(250):
            out.append(source.next())

    threads = [threading.Thread(target=draw, args=(out,)) for out in results]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    issued = [nonce for out in results for nonce in out]
    assert len(set(issued)) == len(issued) == 8 * 250
    assert max(issued) == CLOCK_START_MS + len(issued) - 1
    # each caller still observes its own nonces in increasing order
    for out in results:
        assert out == sorted(out)
