"""
Region Resolver

Finds the most specific mapped region under a cursor in either view and
computes the declarative decoration list an editor needs to draw the
mapping. The resolver itself is stateless; the hover/freeze state lives in
HighlightTracker, owned by the caller.
"""

import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple

from solbolt.core.mapping import MappingEntry, MappingTable, View
from solbolt.utils.logging import get_logger

logger = get_logger("regions")

NUM_COLOR_CLASSES = 12
HIGHLIGHT_CLASS = "frag-highlighted"
HIGHLIGHT_MARGIN_CLASS = "frag-highlighted-margin"


def _entry_contains(entry: MappingEntry, view: View, line: int, column: int) -> bool:
    if view is View.SOURCE:
        return entry.source_position.contains(line, column)
    return any(span.contains(line, column) for span in entry.compiled_spans)


def resolve_region(table: MappingTable, view: View, position: Tuple[int, int]) -> Optional[str]:
    """
    Return the key of the most specific region containing ``position``.

    ``position`` is a 1-indexed ``(line, column)`` in the given view. Among
    all containing entries the one with the smallest source length wins;
    equal lengths fall back to the lower ``begin`` then ``end`` so the
    answer does not depend on insertion order. Returns None when nothing
    contains the position.
    """
    line, column = position
    view = View(view)
    for entry in table.by_specificity():
        if _entry_contains(entry, view, line, column):
            return entry.key
    return None


@dataclass(frozen=True)
class HighlightSelection:
    """The highlighted region and which view's hover produced it."""
    key: str
    triggered_from: View


class HighlightTracker:
    """
    Caller-side highlight state for a pair of source/compiled editors.

    While ``frozen`` the selection is pinned and hovering does not change
    it. The selection is cleared whenever the tables are replaced.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.selection: Optional[HighlightSelection] = None
        self.frozen = False

    def hover(self, table: MappingTable, view: View, position: Tuple[int, int]) -> Optional[HighlightSelection]:
        """Resolve ``position`` and make it the selection unless frozen. Returns the current selection."""
        with self._lock:
            if self.frozen:
                return self.selection
            key = resolve_region(table, view, position)
            if key is not None and (self.selection is None or self.selection.key != key):
                self.selection = HighlightSelection(key, View(view))
                logger.debug("Highlight %s from %s view", key, self.selection.triggered_from.value)
            return self.selection

    def select(self, key: str, triggered_from: View) -> HighlightSelection:
        with self._lock:
            self.selection = HighlightSelection(key, View(triggered_from))
            return self.selection

    def toggle_freeze(self) -> bool:
        with self._lock:
            self.frozen = not self.frozen
            return self.frozen

    def clear(self) -> None:
        with self._lock:
            self.selection = None
            self.frozen = False


@dataclass(frozen=True)
class Decoration:
    """
    One region to paint in an editor.

    Whole-line decorations color full lines (``className`` in editor terms);
    the others color exactly the character range (``inlineClassName``).
    """
    start_line: int
    start_char: int
    end_line: int
    end_char: int
    style_class: str
    whole_line: bool
    margin_class: Optional[str] = None
    key: Optional[str] = None

    def to_dict(self) -> dict:
        options = {"isWholeLine": self.whole_line}
        options["className" if self.whole_line else "inlineClassName"] = self.style_class
        if self.margin_class:
            options["linesDecorationsClassName"] = self.margin_class
        return {
            "key": self.key,
            "range": {
                "startLineNumber": self.start_line,
                "startColumn": self.start_char,
                "endLineNumber": self.end_line,
                "endColumn": self.end_char,
            },
            "options": options,
        }


def _style_class(entry: MappingEntry, color_index: int, highlighted: bool) -> str:
    if highlighted:
        return HIGHLIGHT_CLASS
    if entry.gas is not None:
        return entry.gas.gas_class.value
    return f"frag-color-{color_index % NUM_COLOR_CLASSES}"


def build_decorations(
    table: MappingTable,
    view: View,
    highlight: Optional[HighlightSelection] = None,
) -> List[Decoration]:
    """
    Full decoration list for one view, largest regions first so nested
    regions are painted over their parents.

    Regions with gas data are colored by heat-map class; others cycle
    through the fragment colors. The highlighted region uses the highlight
    class plus a margin marker. Multi-line source regions and all compiled
    spans are whole-line decorations.
    """
    view = View(view)
    ordered = sorted(
        table.values(),
        key=lambda e: (-e.length, e.source_range.begin, e.source_range.end),
    )

    decorations = []
    for color_index, entry in enumerate(ordered):
        highlighted = highlight is not None and highlight.key == entry.key
        style = _style_class(entry, color_index, highlighted)
        margin = HIGHLIGHT_MARGIN_CLASS if highlighted else None

        if view is View.SOURCE:
            pos = entry.source_position
            decorations.append(Decoration(
                start_line=pos.start_line,
                start_char=pos.start_char,
                end_line=pos.end_line,
                end_char=pos.end_char,
                style_class=style,
                whole_line=pos.is_multiline,
                margin_class=margin,
                key=entry.key,
            ))
        else:
            for span in entry.compiled_spans:
                decorations.append(Decoration(
                    start_line=span.start_line,
                    start_char=1,
                    end_line=span.end_line,
                    end_char=1,
                    style_class=style,
                    whole_line=True,
                    margin_class=margin,
                    key=entry.key,
                ))

    return decorations


def reveal_line(table: MappingTable, view: View, highlight: Optional[HighlightSelection]) -> Optional[int]:
    """
    Line ``view`` should scroll to so the highlighted region is visible.

    Only the view opposite the one that produced the highlight scrolls: the
    source view goes to the region's first source line, the compiled view to
    the first line of its first span.
    """
    if highlight is None:
        return None
    view = View(view)
    if highlight.triggered_from is view:
        return None
    entry = table.get(highlight.key)
    if entry is None:
        return None
    if view is View.SOURCE:
        return entry.source_position.start_line
    if not entry.compiled_spans:
        return None
    return entry.compiled_spans[0].start_line
