import pytest

from solbolt.core.mapping_store import MappingStore
from solbolt.parsers.symexec import parse_symexec_result
from solbolt.utils.exceptions import SourceChangedError, StaleGenerationError


@pytest.fixture
def store(counter_source, counter_compiled):
    store = MappingStore()
    store.build(counter_source, counter_compiled)
    return store


def test_build_installs_first_generation(store):
    assert store.generation == 1
    assert store.contracts() == ["Counter"]
    assert store.get("Counter").generation == 1
    assert store.mappings.generation == 1
    assert store.get("Missing") is None


def test_rebuild_retires_previous_tables(store, counter_source, counter_compiled):
    old = store.get("Counter")
    store.build(counter_source, counter_compiled)

    assert store.generation == 2
    assert old.retired
    assert not store.get("Counter").retired
    assert store.get("Counter") is not old


def test_merge_against_current_generation(store, counter_symexec):
    table = store.merge_gas("Counter", parse_symexec_result(counter_symexec), store.generation)
    assert table is store.get("Counter")
    assert table.has_symexec
    assert table["108:163"].function_name == "increment"


def test_merge_against_old_generation_is_rejected(store, counter_source, counter_compiled, counter_symexec):
    captured = store.generation
    store.build(counter_source, counter_compiled)

    with pytest.raises(StaleGenerationError) as excinfo:
        store.merge_gas("Counter", parse_symexec_result(counter_symexec), captured)
    assert excinfo.value.details["expected_generation"] == captured
    assert excinfo.value.details["current_generation"] == captured + 1
    assert not store.get("Counter").has_symexec


def test_merge_for_unknown_contract_is_rejected(store, counter_symexec):
    with pytest.raises(StaleGenerationError):
        store.merge_gas("Other", parse_symexec_result(counter_symexec), store.generation)


def test_check_source(store, counter_source):
    store.check_source(counter_source)
    with pytest.raises(SourceChangedError) as excinfo:
        store.check_source(counter_source + "\n")
    assert excinfo.value.message == "Source content has changed, please compile first!"


def test_check_source_before_any_build():
    with pytest.raises(SourceChangedError):
        MappingStore().check_source("contract C {}")


def test_clear(store, counter_symexec):
    table = store.get("Counter")
    generation = store.generation
    store.clear()

    assert table.retired
    assert store.mappings is None
    assert store.tables() == {}
    with pytest.raises(StaleGenerationError):
        store.merge_gas("Counter", parse_symexec_result(counter_symexec), generation)
