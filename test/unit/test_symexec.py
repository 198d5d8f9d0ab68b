import pytest

from solbolt.core.mapping import GasClass, LoopGasEstimate
from solbolt.parsers.symexec import parse_gas_record, parse_symexec_result
from solbolt.utils.exceptions import MalformedInputError, MissingFieldError


def measurement(**overrides):
    item = {
        "numSamples": 2,
        "minOpcodeGas": 10, "maxOpcodeGas": 20,
        "minStorageGas": 0, "maxStorageGas": 100,
        "memGas": 0,
    }
    item.update(overrides)
    return item


def test_mean_worst_case_is_computed_from_maxima():
    record = parse_gas_record(measurement(), "runtime.0:1")
    assert record.mean_worst_case_gas == 60
    assert record.gas_class is GasClass.CLASS_2


def test_reported_mean_worst_case_wins():
    record = parse_gas_record(measurement(meanWcGas=250), "runtime.0:1")
    assert record.mean_worst_case_gas == 250
    assert record.gas_class is GasClass.CLASS_4


def test_num_tx_is_accepted_as_sample_count():
    item = measurement()
    item["numTx"] = item.pop("numSamples")
    assert parse_gas_record(item, "runtime.0:1").num_samples == 2


def test_zero_samples_has_no_class():
    record = parse_gas_record(measurement(numSamples=0), "runtime.0:1")
    assert record.mean_worst_case_gas is None
    assert record.gas_class is GasClass.NONE


@pytest.mark.parametrize("field_name", ["minOpcodeGas", "maxOpcodeGas", "minStorageGas", "maxStorageGas", "memGas"])
def test_missing_gas_field_names_path(field_name):
    item = measurement()
    del item[field_name]
    with pytest.raises(MissingFieldError) as excinfo:
        parse_gas_record(item, "runtime.12:40")
    assert excinfo.value.path == f"runtime.12:40.{field_name}"


def test_missing_sample_count_names_path():
    item = measurement()
    del item["numSamples"]
    with pytest.raises(MissingFieldError) as excinfo:
        parse_gas_record(item, "creation.1:2")
    assert excinfo.value.path == "creation.1:2.numSamples"


def test_non_numeric_gas_is_rejected():
    with pytest.raises(MalformedInputError):
        parse_gas_record(measurement(memGas="lots"), "runtime.0:1")


def test_side_annotations_do_not_affect_class():
    record = parse_gas_record(measurement(
        functionGas=99999,
        loopGas={"312": {"gas": 400, "isHidden": True}},
        detectedIssues=["storage mutation inside a loop"],
    ), "runtime.0:1")
    assert record.gas_class is GasClass.CLASS_2
    assert record.function_gas == 99999
    assert record.loop_gas == {312: LoopGasEstimate(400, True)}
    assert record.issues == ["storage mutation inside a loop"]


def test_bad_loop_program_counter_is_rejected():
    with pytest.raises(MalformedInputError) as excinfo:
        parse_gas_record(measurement(loopGas={"pc": {"gas": 1}}), "runtime.0:1")
    assert excinfo.value.path == "runtime.0:1.loopGas.pc"


def test_both_phases_are_required():
    with pytest.raises(MissingFieldError) as excinfo:
        parse_symexec_result({"creation": {}})
    assert excinfo.value.path == "runtime"


def test_invalid_range_key_is_rejected():
    with pytest.raises(MalformedInputError):
        parse_symexec_result({"creation": {}, "runtime": {"not-a-key": measurement()}})


def test_counter_result(counter_symexec):
    result = parse_symexec_result(counter_symexec)
    assert set(result.creation) == {"81:101"}
    assert set(result.runtime) == {"108:163", "146:156", "146:151", "999:1000"}
    assert len(result) == 5
    assert [phase for phase, _ in result.phases()] == ["creation", "runtime"]
    assert result.runtime["146:156"].mean_worst_case_gas == 100


def test_issues_must_be_a_list():
    with pytest.raises(MalformedInputError) as excinfo:
        parse_gas_record(measurement(detectedIssues=3), "runtime.146:156")
    assert excinfo.value.path == "runtime.146:156.detectedIssues"
