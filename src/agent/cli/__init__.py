"""
Command-line interface for the ETL agent.

Available commands:
- run: Poll the control plane and process jobs
- register: Register a new agent and print its key
- compare: Run one comparison locally
- capabilities: Report SQL Server Windows Authentication support
"""

import sys

from .commands import cmd_capabilities, cmd_compare, cmd_register, cmd_run
from .credentials import configure_logging, resolve_agent_key
from .parser import create_parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the etl-agent CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args)

    if args.command == "run":
        cmd_run(args)
    elif args.command == "register":
        cmd_register(args)
    elif args.command == "compare":
        cmd_compare(args)
    elif args.command == "capabilities":
        cmd_capabilities(args)
    else:
        parser.print_help()
        sys.exit(1)


__all__ = [
    "main",
    "configure_logging",
    "resolve_agent_key",
    "cmd_run",
    "cmd_register",
    "cmd_compare",
    "cmd_capabilities",
    "create_parser",
]


if __name__ == "__main__":
    main()
