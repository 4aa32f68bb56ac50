"""
JIT Flags CLI

Command-line interface for inspecting JIT compiler flags.
Shows the resolved flag values, prints descriptor help, and checks an
override string before it is put into the environment.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from jit_flags import FlagRegistry, FlagsConfig, get_flags_config


class FlagsCLI:
    """Command-line interface for flag inspection."""

    def __init__(self, config: FlagsConfig):
        self.config = config
        self.registry = FlagRegistry.from_config(config)

    def show_flags(self):
        """Show the resolved value of every flag group."""
        groups = {
            "Build XLA ops": self.registry.get_build_xla_ops_pass_flags(),
            "Mark for compilation": self.registry.get_mark_for_compilation_pass_flags(),
            "XLA device": self.registry.get_xla_device_flags(),
            "XLA ops common": self.registry.get_xla_ops_common_flags(),
            "Floating point jitter": self.registry.get_introduce_floating_point_jitter_pass_flags(),
        }

        print(f"\nJIT Flags (overrides from {self.config.flags_env_var})")
        print("=" * 80)
        for title, group in groups.items():
            print(f"\n{title}:")
            print("-" * 80)
            for field_name, value in group.model_dump().items():
                print(f"  {field_name:<55} {value!r}")
        print("-" * 80)

    def show_usage(self):
        """Show help text for every registered flag."""
        print(f"\nFlags accepted in {self.config.flags_env_var}:")
        print(self.registry.flag_table.usage())

    def check_overrides(self, overrides: str) -> bool:
        """
        Parse an override string against a fresh registry.

        Returns:
            True if every flag is known and every value parses
        """
        registry = FlagRegistry(self.config.flags_env_var,
                                environ={self.config.flags_env_var: overrides})
        try:
            table = registry.flag_table
        except SystemExit as e:
            print(f"Invalid overrides: {e}")
            return False
        print(f"Overrides OK ({len(table)} flags known).")
        return True


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="JIT compiler flags")
    parser.add_argument('--env-file', type=Path, default=None, help='Path to a .env file')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Show command
    subparsers.add_parser('show', help='Show resolved flag values')

    # Usage command
    subparsers.add_parser('usage', help='Show help for every flag')

    # Check command
    check_parser = subparsers.add_parser('check', help='Validate an override string')
    check_parser.add_argument('overrides', help='Override string, e.g. "tf_xla_auto_jit=2"')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.env_file is not None:
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    config = get_flags_config(args.env_file)
    logging.basicConfig(level=config.log_level,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    cli = FlagsCLI(config)

    # Execute command
    if args.command == 'show':
        cli.show_flags()
    elif args.command == 'usage':
        cli.show_usage()
    elif args.command == 'check':
        return 0 if cli.check_overrides(args.overrides) else 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
