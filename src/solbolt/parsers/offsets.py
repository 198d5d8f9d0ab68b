"""
Offset Resolver

Converts flat source byte offsets, as emitted by the Solidity compiler in
legacy assembly (``begin``/``end``) and AST ``src`` attributes, into
1-indexed (line, column) pairs.

Offsets are byte offsets into the UTF-8 encoding of the source. Offsets
outside ``[0, len(source)]`` are rejected with OutOfRangeOffsetError rather
than clamped, so malformed compiler output surfaces early.
"""

from bisect import bisect_left
from typing import List, Tuple, Union

from solbolt.core.mapping import SourcePosition, SourceRange
from solbolt.utils.exceptions import OutOfRangeOffsetError

NEWLINE = 0x0A


def _as_bytes(source_text: Union[str, bytes]) -> bytes:
    if isinstance(source_text, str):
        return source_text.encode("utf-8")
    return source_text


class LineIndex:
    """
    Precomputed newline positions of one source text.

    Resolving an offset is a binary search over the newline table, so a
    contract with thousands of annotated instructions is resolved without
    rescanning the source per instruction.
    """

    def __init__(self, source_text: Union[str, bytes]):
        self.data = _as_bytes(source_text)
        self.length = len(self.data)
        self.newlines: List[int] = [i for i, b in enumerate(self.data) if b == NEWLINE]

    def line_col(self, offset: int) -> Tuple[int, int]:
        """Return the 1-indexed (line, column) of a byte offset."""
        if offset < 0 or offset > self.length:
            raise OutOfRangeOffsetError(offset, self.length)
        # Newlines strictly before offset
        count = bisect_left(self.newlines, offset)
        last_newline = self.newlines[count - 1] if count else -1
        return count + 1, offset - last_newline

    def offset(self, line: int, column: int) -> int:
        """Inverse of line_col: rebuild the byte offset of a (line, column) pair."""
        if line < 1 or line > len(self.newlines) + 1:
            raise OutOfRangeOffsetError(line, len(self.newlines) + 1)
        line_start = self.newlines[line - 2] + 1 if line > 1 else 0
        result = line_start + column - 1
        if result < 0 or result > self.length:
            raise OutOfRangeOffsetError(result, self.length)
        return result

    def position(self, source_range: SourceRange) -> SourcePosition:
        """Resolve both ends of a range into a SourcePosition."""
        start_line, start_char = self.line_col(source_range.begin)
        end_line, end_char = self.line_col(source_range.end)
        return SourcePosition(
            start_line=start_line,
            start_char=start_char,
            end_line=end_line,
            end_char=end_char,
            length=source_range.length,
        )


def offset_to_line_col(source_text: Union[str, bytes], offset: int) -> Tuple[int, int]:
    """
    Convert a byte offset to a 1-indexed (line, column) pair.

    ``line`` is one more than the number of newlines strictly before
    ``offset``; ``column`` is the distance from the last such newline.
    ``offset == 0`` is (1, 1) and ``offset == len(source)`` is the
    end-of-file position.
    """
    data = _as_bytes(source_text)
    if offset < 0 or offset > len(data):
        raise OutOfRangeOffsetError(offset, len(data))
    count = data.count(b"\n", 0, offset)
    last_newline = data.rfind(b"\n", 0, offset)
    return count + 1, offset - last_newline


def line_col_to_offset(source_text: Union[str, bytes], line: int, column: int) -> int:
    """Rebuild the byte offset of a 1-indexed (line, column) pair by re-walking lines."""
    return LineIndex(source_text).offset(line, column)
