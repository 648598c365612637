from potator.entity import NONE_ENTITY, EntityRegistry, default_registry


def test_new_registry_starts_at_zero_and_counts_up():
    registry = EntityRegistry()
    assert [registry.get_new() for _ in range(3)] == [0, 1, 2]


def test_registries_are_independent():
    first = EntityRegistry()
    second = EntityRegistry()
    first.get_new()
    first.get_new()
    assert second.get_new() == 0


def test_default_registry_is_shared():
    first = default_registry().get_new()
    second = default_registry().get_new()
    assert second == first + 1


def test_default_registry_never_repeats():
    registry = default_registry()
    produced = [registry.get_new() for _ in range(10)]
    assert len(set(produced)) == 10
    assert NONE_ENTITY not in produced