import copy

import pytest

from solbolt.core.mapping import CompiledSpan, SourceRange
from solbolt.parsers.legacy_assembly import (
    AssemblyInstruction,
    InstructionStreamBuilder,
    Section,
    build_contract_mapping,
    build_mapping_tables,
    parse_sections,
)
from solbolt.utils.exceptions import MalformedInputError, MissingFieldError, OutOfRangeOffsetError


def instr(name, begin=None, end=None, source=0, value=None):
    data = {"name": name, "source": source}
    if begin is not None:
        data["begin"] = begin
        data["end"] = end
    if value is not None:
        data["value"] = value
    return data


def assembly(constructor, runtime, code_key=".code", data_key=".data"):
    return {code_key: constructor, data_key: {"0": {code_key: runtime}}}


def test_adjacent_instructions_share_one_span():
    source = "function(){}"
    builder = InstructionStreamBuilder(source, "C")
    builder.add_section(Section.CONSTRUCTOR, [
        AssemblyInstruction.from_dict(instr("PUSH", 0, 12, value="80")),
        AssemblyInstruction.from_dict(instr("MSTORE", 0, 12)),
        AssemblyInstruction.from_dict(instr("STOP", source=-1)),
    ])
    table = builder.build()

    assert list(table.keys()) == ["0:12"]
    assert table["0:12"].compiled_spans == [CompiledSpan(2, 3)]
    assert table.listing_lines == [
        "CONSTRUCTOR:",
        "\t\t\t\tPUSH 80",
        "\t\t\t\tMSTORE",
        "\t\t\t\tSTOP",
    ]
    assert builder.unmapped == 1


def test_non_adjacent_emissions_keep_separate_spans():
    source = "for(;;){x;}"
    table = build_contract_mapping(source, "C", assembly(
        [],
        [
            instr("DUP1", 8, 9),
            instr("POP", 0, 11),
            instr("DUP1", 8, 9),
            instr("SWAP1", 8, 9),
        ],
    ))
    # Line 1 CONSTRUCTOR:, line 2 SUBROUTINES:
    assert table["8:9"].compiled_spans == [CompiledSpan(3, 3), CompiledSpan(5, 6)]
    assert table["0:11"].compiled_spans == [CompiledSpan(4, 4)]


def test_unmapped_instruction_breaks_adjacency():
    source = "x = 1;"
    table = build_contract_mapping(source, "C", assembly(
        [instr("PUSH", 0, 5, value="1"), instr("JUMPDEST", source=-1), instr("SSTORE", 0, 5)],
        [],
    ))
    assert table["0:5"].compiled_spans == [CompiledSpan(2, 2), CompiledSpan(4, 4)]


def test_contract_range_instructions_are_dropped():
    source = "contract C { uint x; }"
    builder = InstructionStreamBuilder(source, "C", excluded_range=SourceRange(0, 22))
    builder.add_section(Section.RUNTIME, [
        AssemblyInstruction.from_dict(instr("PUSH", 0, 22, value="80")),
        AssemblyInstruction.from_dict(instr("SLOAD", 13, 19)),
    ])
    table = builder.build()

    assert "0:22" not in table
    assert table.listing_lines == ["SUBROUTINES:", "\t\t\t\tSLOAD"]
    assert table["13:19"].compiled_spans == [CompiledSpan(2, 2)]
    assert builder.dropped == 1


def test_other_source_files_are_not_mapped():
    table = build_contract_mapping("abc", "C", assembly([instr("ADD", 0, 2, source=1)], []))
    assert len(table) == 0
    assert table.listing_lines == ["CONSTRUCTOR:", "\t\t\t\tADD", "SUBROUTINES:"]


def test_tag_rendering():
    assert AssemblyInstruction.from_dict(instr("tag", value="7")).render() == "\t\tTAG 7:"
    assert AssemblyInstruction.from_dict(instr("PUSH [tag]", value="7")).render() == "\t\t\t\tPUSH [tag] 7"


def test_both_key_spellings_are_accepted():
    dotted = parse_sections(assembly([instr("STOP")], [instr("ADD")]))
    plain = parse_sections(assembly([instr("STOP")], [instr("ADD")], code_key="code", data_key="data"))
    assert dotted == plain
    assert [i.name for i in plain[Section.RUNTIME]] == ["ADD"]


def test_missing_runtime_assembly_names_path():
    with pytest.raises(MissingFieldError) as excinfo:
        parse_sections({".code": [], ".data": {}})
    assert excinfo.value.path == "legacyAssembly.data.0"


def test_instruction_without_name_names_path():
    with pytest.raises(MissingFieldError) as excinfo:
        parse_sections(assembly([instr("STOP"), {"begin": 0, "end": 1}], []))
    assert excinfo.value.path == "legacyAssembly.code[1].name"


def test_code_must_be_a_list():
    with pytest.raises(MalformedInputError):
        parse_sections({".code": {}, ".data": {"0": {".code": []}}})


def test_offset_past_end_of_source_raises():
    with pytest.raises(OutOfRangeOffsetError):
        build_contract_mapping("abc", "C", assembly([instr("ADD", 0, 10)], []))


def test_counter_tables(counter_mappings):
    assert counter_mappings.contract_names() == ["Counter"]
    assert counter_mappings.method_identifiers["Counter"]["increment()"] == "d09de08a"
    assert counter_mappings.ast["nodeType"] == "SourceUnit"

    table = counter_mappings["Counter"]
    assert len(table.listing_lines) == 16
    assert sorted(table.keys()) == ["108:163", "146:151", "146:156", "146:157", "81:101"]
    assert "58:165" not in table
    assert table["108:163"].compiled_spans == [CompiledSpan(6, 7), CompiledSpan(12, 12)]
    assert table["146:156"].compiled_spans == [CompiledSpan(8, 8), CompiledSpan(10, 11)]
    assert table.listing_lines[14] == "\t\t\t\tINVALID"


def test_every_compiled_line_belongs_to_at_most_one_entry(counter_table):
    seen = {}
    for entry in counter_table.values():
        assert entry.compiled_spans
        for span in entry.compiled_spans:
            assert span.start_line <= span.end_line
            for line in range(span.start_line, span.end_line + 1):
                assert line not in seen
                seen[line] = entry.key
    assert max(seen) <= len(counter_table.listing_lines)


def test_missing_contracts_names_path(counter_source):
    with pytest.raises(MissingFieldError) as excinfo:
        build_mapping_tables(counter_source, {"sources": {}})
    assert excinfo.value.path == "contracts"


def test_missing_ast_names_path(counter_source, counter_compiled):
    compiled = copy.deepcopy(counter_compiled)
    del compiled["sources"]["Counter.sol"]["ast"]
    with pytest.raises(MissingFieldError) as excinfo:
        build_mapping_tables(counter_source, compiled)
    assert excinfo.value.path == "sources.Counter.sol.ast"


def test_contract_without_assembly_is_skipped(counter_source, counter_compiled):
    mappings = build_mapping_tables(counter_source, counter_compiled)
    assert "ICounter" not in mappings


@pytest.mark.parametrize("field_name", ["begin", "end", "source"])
def test_non_integer_location_names_path(field_name):
    bad = instr("ADD", 0, 1)
    bad[field_name] = "1"
    with pytest.raises(MalformedInputError) as excinfo:
        parse_sections(assembly([], [instr("STOP"), bad]))
    assert excinfo.value.path == f"legacyAssembly.data.0.code[1].{field_name}"


def test_non_string_name_names_path():
    with pytest.raises(MalformedInputError) as excinfo:
        parse_sections(assembly([{"name": 5}], []))
    assert excinfo.value.path == "legacyAssembly.code[0].name"


def test_non_string_ast_src_names_path(counter_source, counter_compiled):
    compiled = copy.deepcopy(counter_compiled)
    contract = compiled["sources"]["Counter.sol"]["ast"]["nodes"][-1]
    contract["src"] = 58
    with pytest.raises(MalformedInputError) as excinfo:
        build_mapping_tables(counter_source, compiled)
    assert excinfo.value.path == "ast.ContractDefinition.src"
