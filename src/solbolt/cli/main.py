#!/usr/bin/env python3
"""
Main entry point for solbolt

This module serves as the CLI entry point, handling argument parsing
and routing to the appropriate command implementations in the cli/ module.
"""

import sys
import argparse

from solbolt import __version__
from solbolt.utils.logging import setup_logging

from .annotate import annotate_command
from .resolve import resolve_command
from .compile import compile_command


def main(argv=None):
    """Main entry point for solbolt CLI."""
    parser = argparse.ArgumentParser(description='SolBolt - Solidity source to EVM assembly explorer')
    parser.add_argument('--version', '-v', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--verbose', action='store_true', help='Enable trace logging (more detailed than --debug)')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress log output')
    parser.add_argument('--log-file', help='Also write all log records to this file')

    # Create subparsers for different commands
    subparsers = parser.add_subparsers(dest='command', help='Commands')
    subparsers.required = True

    # annotate command
    annotate_parser = subparsers.add_parser('annotate', help='Map source regions to assembly lines from compiler output')
    annotate_parser.add_argument('source', help='Solidity source file')
    annotate_parser.add_argument('compiled', help='Compiler standard-JSON output for the source')
    annotate_parser.add_argument('--symexec', '-s', help='Symbolic-execution result JSON to attach gas data from')
    annotate_parser.add_argument('--contract', '-c', help='Contract to show (default: first compiled contract)')
    annotate_parser.add_argument('--listing', action='store_true', help='Print the assembly listing instead of the region table')
    annotate_parser.add_argument('--json', action='store_true', help='Output mapping data as JSON for web app consumption')

    # resolve command
    resolve_parser = subparsers.add_parser('resolve', help='Find the region under a position in the source or the listing')
    resolve_parser.add_argument('source', help='Solidity source file')
    resolve_parser.add_argument('compiled', help='Compiler standard-JSON output for the source')
    resolve_parser.add_argument('--view', choices=['source', 'compiled'], default='source', help='Which view LINE and COLUMN refer to (default: source)')
    resolve_parser.add_argument('line', type=int, help='1-indexed line')
    resolve_parser.add_argument('column', type=int, nargs='?', default=1, help='1-indexed column (default: 1)')
    resolve_parser.add_argument('--contract', '-c', help='Contract to search (default: first compiled contract)')
    resolve_parser.add_argument('--symexec', '-s', help='Symbolic-execution result JSON to show gas statistics from')
    resolve_parser.add_argument('--json', action='store_true', help='Output result as JSON')

    # compile command
    compile_parser = subparsers.add_parser('compile', help='Compile (and optionally symbolically execute) a source file remotely')
    compile_parser.add_argument('source', help='Solidity source file')
    compile_parser.add_argument('--symexec', '-s', metavar='CONTRACT', help='Run symbolic execution of this contract after compiling')
    compile_parser.add_argument('--config', help='Configuration file (default: ./solbolt.config.yaml)')
    compile_parser.add_argument('--service-url', help='Compiler/symbolic-execution service URL')
    compile_parser.add_argument('--save-config', action='store_true', help='Save configuration to solbolt.config.yaml')
    compile_parser.add_argument('--timeout', type=float, default=300, help='Seconds to wait for each remote task (default: 300)')
    compile_parser.add_argument('--json', action='store_true', help='Output mapping data as JSON for web app consumption')

    args = parser.parse_args(argv)

    setup_logging(quiet=args.quiet, debug=args.debug, verbose=args.verbose, log_file=args.log_file)

    # Route commands to CLI modules
    if args.command == 'annotate':
        return annotate_command(args)
    elif args.command == 'resolve':
        return resolve_command(args)
    elif args.command == 'compile':
        return compile_command(args)

    return 0


if __name__ == '__main__':
    sys.exit(main())
