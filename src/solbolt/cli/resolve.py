"""
Resolve command implementation.

Prints the most specific mapped region under a line/column position of
either the source or the assembly listing. With a symbolic-execution result
the region's per-sample gas means are shown as well.
"""

from solbolt.core.mapping import View
from solbolt.core.regions import resolve_region
from solbolt.core.serializer import MappingSerializer
from solbolt.utils.colors import bold, warning
from solbolt.utils.exceptions import SolboltError
from solbolt.cli.common import (
    attach_symexec,
    format_entry,
    format_statistics,
    handle_command_error,
    load_compilation,
    print_json,
    select_table,
)


def resolve_command(args) -> int:
    """
    Execute the resolve command.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    json_mode = getattr(args, 'json', False)
    view = View(args.view)

    try:
        _, _, mappings = load_compilation(args.source, args.compiled)
        table = select_table(mappings, args.contract)
        if args.symexec:
            attach_symexec(mappings, table, args.symexec)
    except SolboltError as e:
        return handle_command_error(e, json_mode)

    key = resolve_region(table, view, (args.line, args.column))
    entry = table[key] if key is not None else None

    if json_mode:
        serializer = MappingSerializer(include_listing=False)
        data = {"contract": table.contract, "view": view.value,
                "line": args.line, "column": args.column, "key": key}
        if entry is not None:
            data["sourceMap"] = serializer.source_map(entry.source_position)
            data["compiledMaps"] = [
                {"startLine": span.start_line, "endLine": span.end_line}
                for span in entry.compiled_spans
            ]
            if entry.gas is not None:
                data["gasMap"] = serializer.gas_map(entry.gas)
                data["gasStatistics"] = serializer.gas_statistics(entry.gas)
        print_json(data)
        return 0

    if entry is None:
        print(warning(f"No region at {view.value} line {args.line} column {args.column}"))
        return 0

    print(bold(f"Region {key}"))
    print(format_entry(entry))
    if entry.gas is not None:
        for line in format_statistics(entry.gas):
            print(line)
    return 0
