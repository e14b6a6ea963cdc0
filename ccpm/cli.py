import sys
from argparse import ArgumentParser
from typing import Dict, List, Optional

from ccpm.builder import Builder
from ccpm.commands import (BuildCommand, Command, PackageListCommand,
                           ValidateCommand, VersionListCommand)
from ccpm.config import Config, read_config


def get_commands(builder: Builder) -> Dict[str, Command]:
    return {
        "build": BuildCommand(builder),
        "validate": ValidateCommand(builder),
        "packages": PackageListCommand(builder),
        "versions": VersionListCommand(builder),
    }


def get_parser(commands: Dict[str, Command]) -> ArgumentParser:
    parser = ArgumentParser(
        description="Builds package directories into a distributable package repository"
    )
    command_parsers = parser.add_subparsers(
        metavar="<command>", help="Valid commands:", dest="command", required=True
    )
    for name, command in commands.items():
        command_parser = command_parsers.add_parser(name, help=command.help)
        command.configure_parser(command_parser)
    return parser


def main(argv: Optional[List[str]] = None, config: Optional[Config] = None) -> int:
    if config is None:
        config = read_config()
    config.configure_logger()

    builder = Builder(
        layout=config.layout,
        compression_level=config.compression_level,
        index_indent=config.index_indent,
    )
    commands = get_commands(builder)
    parser = get_parser(commands)

    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    args_dict = vars(args)
    command = commands[args_dict.pop("command")]
    return 0 if command.execute_safe(**args_dict) else 1


if __name__ == "__main__":
    sys.exit(main())
