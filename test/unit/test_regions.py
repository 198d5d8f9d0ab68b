import threading

import pytest

from solbolt.core.mapping import MappingTable, SourceRange, View
from solbolt.core.regions import (
    HIGHLIGHT_CLASS,
    HIGHLIGHT_MARGIN_CLASS,
    HighlightSelection,
    HighlightTracker,
    build_decorations,
    resolve_region,
    reveal_line,
)
from solbolt.parsers.offsets import LineIndex
from solbolt.parsers.symexec import parse_symexec_result
from solbolt.core.gas import merge_gas


def table_of(source, *ranges):
    index = LineIndex(source)
    table = MappingTable("C")
    for line, (begin, end) in enumerate(ranges, start=1):
        source_range = SourceRange(begin, end)
        table.add_entry(source_range, index.position(source_range)).add_line(line)
    return table


@pytest.mark.parametrize("position,expected", [
    ((8, 10), "146:151"),
    ((8, 14), "146:151"),
    ((8, 15), "146:156"),
    ((8, 19), "146:156"),
    ((8, 20), "146:157"),
    ((8, 1), "108:163"),
    ((7, 5), "108:163"),
    ((9, 6), "108:163"),
    ((5, 5), "81:101"),
    ((7, 4), None),
    ((9, 7), None),
    ((3, 1), None),
])
def test_resolve_source_position(counter_table, position, expected):
    assert resolve_region(counter_table, View.SOURCE, position) == expected


@pytest.mark.parametrize("line,expected", [
    (1, None),
    (6, "108:163"),
    (9, "146:151"),
    (11, "146:156"),
    (12, "108:163"),
    (15, None),
    (16, "146:157"),
])
def test_resolve_compiled_line(counter_table, line, expected):
    assert resolve_region(counter_table, View.COMPILED, (line, 1)) == expected


def test_view_may_be_given_by_name(counter_table):
    assert resolve_region(counter_table, "compiled", (9, 1)) == "146:151"


def test_equal_length_tie_breaks_on_begin():
    source = "abcdef"
    forward = table_of(source, (0, 4), (2, 6))
    backward = table_of(source, (2, 6), (0, 4))
    assert resolve_region(forward, View.SOURCE, (1, 3)) == "0:4"
    assert resolve_region(backward, View.SOURCE, (1, 3)) == "0:4"


def test_innermost_wins_regardless_of_insertion_order():
    source = "{ { x } }"
    outer_first = table_of(source, (0, 9), (2, 7), (4, 5))
    inner_first = table_of(source, (4, 5), (2, 7), (0, 9))
    for table in (outer_first, inner_first):
        assert resolve_region(table, View.SOURCE, (1, 5)) == "4:5"
        assert resolve_region(table, View.SOURCE, (1, 3)) == "2:7"
        assert resolve_region(table, View.SOURCE, (1, 1)) == "0:9"


def test_source_decorations_are_largest_first(counter_table):
    decorations = build_decorations(counter_table, View.SOURCE)
    assert [d.key for d in decorations] == ["108:163", "81:101", "146:157", "146:156", "146:151"]

    function = decorations[0]
    assert function.whole_line
    assert function.style_class == "frag-color-0"
    assert (function.start_line, function.end_line) == (7, 9)

    statement = decorations[2]
    assert not statement.whole_line
    assert (statement.start_char, statement.end_char) == (9, 20)
    assert statement.to_dict()["options"] == {"isWholeLine": False, "inlineClassName": "frag-color-2"}


def test_compiled_decorations_cover_every_span(counter_table):
    decorations = build_decorations(counter_table, View.COMPILED)
    function = [d for d in decorations if d.key == "108:163"]
    assert [(d.start_line, d.end_line) for d in function] == [(6, 7), (12, 12)]
    assert all(d.whole_line and d.start_char == 1 for d in decorations)


def test_highlighted_and_gas_classes(counter_mappings, counter_symexec):
    table = counter_mappings["Counter"]
    merge_gas(table, parse_symexec_result(counter_symexec))
    selection = HighlightSelection("146:151", View.SOURCE)

    by_key = {d.key: d for d in build_decorations(table, View.SOURCE, selection)}
    assert by_key["146:151"].style_class == HIGHLIGHT_CLASS
    assert by_key["146:151"].margin_class == HIGHLIGHT_MARGIN_CLASS
    assert by_key["146:156"].style_class == "frag-heatmap-2"
    assert by_key["146:156"].margin_class is None
    assert by_key["146:157"].style_class.startswith("frag-color-")
    assert by_key["146:151"].to_dict()["options"]["linesDecorationsClassName"] == HIGHLIGHT_MARGIN_CLASS


def test_reveal_line_scrolls_the_other_view(counter_table):
    from_source = HighlightSelection("108:163", View.SOURCE)
    from_compiled = HighlightSelection("108:163", View.COMPILED)

    assert reveal_line(counter_table, View.COMPILED, from_source) == 6
    assert reveal_line(counter_table, View.SOURCE, from_source) is None
    assert reveal_line(counter_table, View.SOURCE, from_compiled) == 7
    assert reveal_line(counter_table, View.SOURCE, None) is None
    assert reveal_line(counter_table, View.SOURCE, HighlightSelection("1:2", View.COMPILED)) is None


def test_tracker_hover_and_freeze(counter_table):
    tracker = HighlightTracker()
    assert tracker.hover(counter_table, View.SOURCE, (3, 1)) is None

    selection = tracker.hover(counter_table, View.SOURCE, (8, 10))
    assert selection == HighlightSelection("146:151", View.SOURCE)

    # Hovering empty space keeps the last selection
    assert tracker.hover(counter_table, View.SOURCE, (3, 1)) == selection

    assert tracker.toggle_freeze()
    assert tracker.hover(counter_table, View.COMPILED, (12, 1)) == selection
    assert not tracker.toggle_freeze()
    assert tracker.hover(counter_table, View.COMPILED, (12, 1)) == HighlightSelection("108:163", View.COMPILED)

    tracker.clear()
    assert tracker.selection is None
    assert not tracker.frozen


def test_tracker_is_safe_across_threads(counter_table):
    tracker = HighlightTracker()
    positions = [(8, 10), (8, 17), (9, 2), (5, 5)]

    def hover_many(position):
        for _ in range(200):
            tracker.hover(counter_table, View.SOURCE, position)

    threads = [threading.Thread(target=hover_many, args=(p,)) for p in positions]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert tracker.selection.key in {"146:151", "146:156", "108:163", "81:101"}
