"""
Compile command implementation.

Sends a source file to the remote compiler service, builds the mapping of
every compiled contract and, optionally, runs symbolic execution for one
contract and attaches its gas data.
"""

from solbolt.config import SolboltConfig
from solbolt.core.serializer import MappingSerializer
from solbolt.remote.poller import TaskKind, TaskStatus
from solbolt.remote.session import ExplorerSession
from solbolt.utils.colors import info, success, warning
from solbolt.utils.exceptions import SolboltError
from solbolt.utils.logging import logger
from solbolt.cli.common import (
    handle_command_error,
    print_gas_summary,
    print_json,
    print_table,
    read_source,
)


def compile_command(args) -> int:
    """
    Execute the compile command.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    json_mode = getattr(args, 'json', False)
    session = None

    try:
        config = SolboltConfig.load(args.config)
        if args.service_url:
            config.service.url = args.service_url

        if args.save_config:
            path = config.save()
            if not json_mode:
                print(success(f"✓ Configuration saved to {path.name}"))

        source = read_source(args.source)
        session = ExplorerSession(config)

        if not json_mode:
            print(f"Compiling with {info(config.service.url)}")
        session.compile(source)
        status = session.wait(TaskKind.COMPILE, timeout=args.timeout)
        if status is TaskStatus.IDLE:
            print(warning("Compile task disappeared from the service, please try again"))
            return 1

        if args.symexec:
            if not json_mode:
                print(f"Running symbolic execution of {info(args.symexec)}")
            session.symexec(args.symexec, source)
            status = session.wait(TaskKind.SYMEXEC, timeout=args.timeout)
            if status is TaskStatus.IDLE:
                print(warning("Symbolic execution task disappeared from the service, please try again"))
                return 1
    except SolboltError as e:
        return handle_command_error(e, json_mode)
    finally:
        if session is not None:
            session.close()

    mappings = session.mappings
    logger.debug(f"Compilation produced {len(mappings)} contract(s)")

    if json_mode:
        print_json(MappingSerializer().serialize(mappings))
        return 0

    for name in mappings:
        table = mappings[name]
        print_table(table)
        if table.has_symexec:
            print_gas_summary(table)
    return 0
