import pytest

from src.timetable.rotation import Rotation


def test_three_items_cycle_every_duration() -> None:
    rotation = Rotation(["a", "b", "c"], duration_seconds=5, started_at=100.0)
    assert rotation.armed
    assert rotation.current_index == 0

    assert rotation.tick(105.0) == 1
    assert rotation.tick(110.0) == 2
    assert rotation.tick(115.0) == 0
    assert rotation.current == "a"


def test_partial_intervals_do_not_advance() -> None:
    rotation = Rotation(["a", "b"], duration_seconds=5, started_at=0.0)
    assert rotation.tick(4.99) == 0
    assert rotation.tick(5.0) == 1


@pytest.mark.parametrize("items", [[], ["only"]])
def test_zero_or_one_item_never_rotates(items: list[str]) -> None:
    rotation = Rotation(items, duration_seconds=5, started_at=0.0)
    assert not rotation.armed
    for now in (5.0, 10.0, 1000.0):
        assert rotation.tick(now) == 0
    assert rotation.current == (items[0] if items else None)


def test_update_restarts_only_on_change() -> None:
    rotation = Rotation(["a", "b", "c"], duration_seconds=5, started_at=0.0)
    rotation.tick(5.0)

    assert rotation.update(["a", "b", "c"], 5, now=7.0) is False
    assert rotation.tick(10.0) == 2

    assert rotation.update(["a", "b"], 5, now=12.0) is True
    assert rotation.current_index == 0
    assert rotation.tick(17.0) == 1

    assert rotation.update(["a", "b"], 10, now=20.0) is True
    assert rotation.tick(25.0) == 0
    assert rotation.tick(30.0) == 1


def test_duration_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Rotation(["a", "b"], duration_seconds=0)
