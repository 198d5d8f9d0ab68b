"""
Annotate command implementation.

Builds the source-to-assembly mapping of a compiled contract offline and,
when a symbolic-execution result is given, attaches its gas data.
"""

from solbolt.core.serializer import MappingSerializer
from solbolt.utils.exceptions import SolboltError
from solbolt.utils.logging import logger
from solbolt.cli.common import (
    attach_symexec,
    handle_command_error,
    load_compilation,
    print_gas_summary,
    print_json,
    print_table,
    select_table,
)


def annotate_command(args) -> int:
    """
    Execute the annotate command.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    json_mode = getattr(args, 'json', False)

    try:
        _, _, mappings = load_compilation(args.source, args.compiled)
        table = select_table(mappings, args.contract)
        if args.symexec:
            attach_symexec(mappings, table, args.symexec)
    except SolboltError as e:
        return handle_command_error(e, json_mode)

    logger.debug(f"Annotating {table!r}")

    if json_mode:
        serializer = MappingSerializer(include_listing=args.listing)
        print_json(serializer.serialize(mappings, table.contract))
        return 0

    if args.listing:
        print(table.listing)
        return 0

    print_table(table)
    if table.has_symexec:
        print_gas_summary(table)
    return 0
