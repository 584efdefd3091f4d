import threading
from concurrent.futures import ThreadPoolExecutor
import pytest
from accounts.adapters.system.sequence_id_generator import (
    GeneratorSettings,
    SequenceIdGenerator,
    MAX_COUNTER,
)
from accounts.domain.errors import ExhaustionError, GeneratorConfigError


@pytest.fixture
def process_generator(monkeypatch):
    """Czysta instancja procesowa na czas testu (oryginał wraca po teście)."""
    monkeypatch.setattr(SequenceIdGenerator, "_instance", None)


def number_of(identifier: str) -> int:
    return int(identifier.rsplit("-", 1)[1])


def test_first_two_numbers_of_fresh_generator():
    gen = SequenceIdGenerator()

    assert gen.next() == "0000-1"
    assert gen.next() == "0000-2"


def test_sequential_calls_are_unique_and_strictly_increasing():
    gen = SequenceIdGenerator()

    issued = [gen.next() for _ in range(1000)]

    assert len(set(issued)) == 1000
    numbers = [number_of(i) for i in issued]
    assert all(a < b for a, b in zip(numbers, numbers[1:]))


def test_concurrent_calls_yield_no_duplicates_and_no_lost_increments():
    # Arrange
    gen = SequenceIdGenerator()
    threads, per_thread = 8, 500
    barrier = threading.Barrier(threads)

    def worker(_):
        barrier.wait()
        return [gen.next() for _ in range(per_thread)]

    # Act
    with ThreadPoolExecutor(max_workers=threads) as pool:
        batches = list(pool.map(worker, range(threads)))
    issued = [i for batch in batches for i in batch]

    # Assert
    assert len(issued) == threads * per_thread
    assert len(set(issued)) == threads * per_thread
    assert {number_of(i) for i in issued} == set(range(1, threads * per_thread + 1))
    assert gen.current == threads * per_thread


def test_each_thread_sees_increasing_numbers():
    gen = SequenceIdGenerator()
    barrier = threading.Barrier(4)

    def worker(_):
        barrier.wait()
        return [number_of(gen.next()) for _ in range(300)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        for numbers in pool.map(worker, range(4)):
            assert numbers == sorted(numbers)


def test_get_instance_returns_same_object(process_generator):
    a = SequenceIdGenerator.get_instance()
    b = SequenceIdGenerator.get_instance()

    assert a is b


def test_handles_from_different_threads_share_one_counter(process_generator):
    barrier = threading.Barrier(6)

    def worker(_):
        barrier.wait()
        gen = SequenceIdGenerator.get_instance()
        return gen, [gen.next() for _ in range(200)]

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(worker, range(6)))

    handles = {id(gen) for gen, _ in results}
    issued = [i for _, batch in results for i in batch]
    assert len(handles) == 1
    assert len(set(issued)) == len(issued) == 1200


def test_concurrent_first_use_builds_a_single_instance():
    # osobna podklasa = własny, jeszcze nieutworzony `_instance`
    class FreshGenerator(SequenceIdGenerator):
        _instance = None
        built = 0

        def __init__(self, *args, **kwargs):
            type(self).built += 1
            super().__init__(*args, **kwargs)

    barrier = threading.Barrier(16)

    def worker(_):
        barrier.wait()
        return FreshGenerator.get_instance()

    with ThreadPoolExecutor(max_workers=16) as pool:
        handles = list(pool.map(worker, range(16)))

    assert FreshGenerator.built == 1
    assert all(h is handles[0] for h in handles)


def test_get_instance_rejects_different_settings(process_generator):
    SequenceIdGenerator.get_instance()

    with pytest.raises(GeneratorConfigError):
        SequenceIdGenerator.get_instance(GeneratorSettings(prefix="9999"))


def test_get_instance_accepts_equal_settings(process_generator):
    gen = SequenceIdGenerator.get_instance()

    assert SequenceIdGenerator.get_instance(GeneratorSettings()) is gen


def test_exhaustion_after_max_value():
    gen = SequenceIdGenerator(start=MAX_COUNTER - 1)

    assert gen.next() == f"0000-{MAX_COUNTER}"
    with pytest.raises(ExhaustionError):
        gen.next()
    # licznik się nie zawija i nie zmienia po błędzie
    assert gen.current == MAX_COUNTER
    with pytest.raises(ExhaustionError):
        gen.next()


def test_exhaustion_with_small_range():
    gen = SequenceIdGenerator(GeneratorSettings(max_value=3))

    assert [gen.next() for _ in range(3)] == ["0000-1", "0000-2", "0000-3"]
    with pytest.raises(ExhaustionError) as exc:
        gen.next()
    assert exc.value.max_value == 3


def test_width_pads_numeric_part():
    gen = SequenceIdGenerator(GeneratorSettings(prefix="ACC", width=4))

    assert gen.next() == "ACC-0001"
    assert gen.format(123456) == "ACC-123456"


def test_start_seeds_counter():
    gen = SequenceIdGenerator(start=41)

    assert gen.current == 41
    assert gen.next() == "0000-42"


@pytest.mark.parametrize(
    "settings, start",
    [
        (GeneratorSettings(prefix=""), 0),
        (GeneratorSettings(prefix="   "), 0),
        (GeneratorSettings(width=-1), 0),
        (GeneratorSettings(max_value=0), 0),
        (GeneratorSettings(max_value=10), 11),
        (GeneratorSettings(), -1),
    ],
)
def test_invalid_configuration_is_rejected(settings, start):
    with pytest.raises(GeneratorConfigError):
        SequenceIdGenerator(settings, start=start)


def test_counter_has_no_setter():
    gen = SequenceIdGenerator()

    with pytest.raises(AttributeError):
        gen.current = 10


def test_first_get_instance_settings_win(process_generator):
    gen = SequenceIdGenerator.get_instance(GeneratorSettings(prefix="ACC", width=3))

    assert gen.next() == "ACC-001"
    assert SequenceIdGenerator.get_instance() is gen
    with pytest.raises(GeneratorConfigError):
        SequenceIdGenerator.get_instance(GeneratorSettings())


def test_fresh_process_instance_starts_at_one(process_generator):
    assert SequenceIdGenerator.get_instance().next() == "0000-1"
