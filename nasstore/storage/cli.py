#!/usr/bin/env python3
"""
nasstore-mount-units

Regenerates the systemd mount units of all shared folders from the
configuration database. Needs root unless --dry-run is given.
"""
import sys
import argparse
from typing import List, Optional

from nasstore import defaults
from nasstore.utils.logger import setup_logging
from nasstore.utils.utils import load_config, resolve_config_path
from .mountunits import MountUnitGenerator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Regenerate systemd mount units for shared folders")
    parser.add_argument("--config", default=defaults.get_config_path(),
                        help="Configuration database (default: %(default)s)")
    parser.add_argument("--factory-config", default=defaults.FACTORY_CONFIG,
                        help="Fallback configuration when the main one is invalid (default: %(default)s)")
    parser.add_argument("--unit-dir", default=defaults.SYSTEMD_UNIT_DIR,
                        help="systemd unit directory (default: %(default)s)")
    parser.add_argument("--sharedfolders-dir", default=defaults.SHAREDFOLDERS_DIR,
                        help="Directory the shared folders are bound into (default: %(default)s)")
    parser.add_argument("--systemctl", default=defaults.SYSTEMCTL_BIN,
                        help="Path to systemctl (default: %(default)s)")
    parser.add_argument("--no-enable", action="store_true",
                        help="Only write unit files, do not call systemctl")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the units instead of writing them")
    parser.add_argument("--log-file", help="Also log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug output")
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and regenerate the units. Returns the exit status."""
    args = build_parser().parse_args(argv)
    logger = setup_logging(verbose=args.verbose, log_file=args.log_file)

    config_path = resolve_config_path(args.config, args.factory_config)
    if config_path is None:
        logger.error(f"No valid configuration found at {args.config} or {args.factory_config}")
        return 1
    config_data = load_config(config_path)

    generator = MountUnitGenerator(
        unit_dir=args.unit_dir,
        sharedfolders_dir=args.sharedfolders_dir,
        systemctl_bin=args.systemctl,
    )

    if args.dry_run:
        try:
            units = generator.render_units(config_data)
        except ValueError as e:
            logger.error(f"Invalid shared folder configuration: {e}")
            return 1
        for name, text in units.items():
            print(f"# {generator.unit_dir}/{name}")
            print(text)
        return 0

    try:
        result = generator.regenerate(config_data, enable=not args.no_enable)
    except ValueError as e:
        logger.error(f"Invalid shared folder configuration, mount units left unchanged: {e}")
        return 1
    except OSError as e:
        logger.error(f"Failed to update mount units in {args.unit_dir}: {e}")
        return 1

    logger.info(f"Wrote {len(result.written)} mount units, removed {len(result.removed)}")
    if not result.ok:
        logger.error(f"systemctl failed for: {', '.join(result.failed)}")
        return 1
    return 0


def main():
    """Console script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
