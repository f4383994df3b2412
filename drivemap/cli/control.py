# This file is part of Drivemap
#
# Drivemap is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Drivemap is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Drivemap.  If not, see <http://www.gnu.org/licenses/>.

"""Command line interface."""

import argparse
import logging
import os
import sys

from drivemap import __version__
from drivemap.config import Config
from drivemap.exceptions import DrivemapError
from drivemap.session import Session


log = logging.getLogger(__name__)
log_levels = [lv.lower() for lv in logging.getLevelNamesMapping()]


class Table:
    """Minimalistic text table constructor."""

    def __init__(self, whitespace: str | None = None):
        """Initialise Table."""
        self.whitespace = whitespace or '\t'
        self.header = []
        self.rows = []

    def add_row(self, row: list) -> None:
        """Add table row."""
        self.rows.append(['-' if col is None else str(col) for col in row])

    def __str__(self) -> str:
        """Build table and return."""
        rows = [[str(h).upper() for h in self.header], *self.rows]
        widths = [max(map(len, col)) for col in zip(*rows, strict=True)]
        return '\n'.join(
            self.whitespace.join(
                val.ljust(width)
                for val, width in zip(row, widths, strict=True)
            ).rstrip()
            for row in rows
        )


def _list_volumes(session: Session) -> None:
    table = Table()
    table.header = ['ID', 'LETTER', 'LABEL', 'CANDIDATE']
    for volume in session.get_topology():
        table.add_row(
            [
                volume.id,
                volume.letter,
                volume.label,
                'boot' if volume.is_boot else volume.is_candidate,
            ]
        )
    print(table)


def _list_tags(session: Session) -> None:
    table = Table()
    table.header = ['ID', 'LABEL', 'LETTER', 'DESIRED LABEL', 'DESIRED LETTER']
    for item in session.get_assignments(session.get_topology()):
        table.add_row(
            [
                item.volume_id,
                item.label,
                item.letter,
                item.desired_label,
                item.desired_letter,
            ]
        )
    print(table)


def _remap(session: Session, args: argparse.Namespace) -> None:
    report = session.remap(dry_run=args.dry_run)
    prefix = 'would change' if args.dry_run else 'changed'
    for mutation in report.mutations:
        print(f'{prefix}: {mutation}')
    for error in report.errors:
        print(f'error: {error}', file=sys.stderr)
    if not report.mutations and report.converged:
        print('nothing to do')
    if args.strict and not report.converged:
        sys.exit(1)


def main(session: Session, args: argparse.Namespace) -> None:
    """Perform actions."""
    match args.command:
        case 'ls':
            _list_volumes(session)
        case 'tags':
            _list_tags(session)
        case 'remap':
            _remap(session, args)


def get_parser() -> argparse.ArgumentParser:
    """Return command line arguments parser."""
    root = argparse.ArgumentParser(
        prog='drivemap',
        description='Assign drive letters and labels to EBS volumes.',
        formatter_class=argparse.RawTextHelpFormatter,
    )
    root.add_argument(
        '-c',
        '--config',
        metavar='FILE',
        help='configuration file',
    )
    root.add_argument(
        '-l',
        '--log-level',
        type=str.lower,
        metavar='LEVEL',
        choices=log_levels,
        help='log level',
    )
    root.add_argument(
        '-V',
        '--version',
        action='version',
        version=__version__,
    )
    subparsers = root.add_subparsers(dest='command', metavar='COMMAND')

    # ls subcommand
    subparsers.add_parser('ls', help='list volumes')

    # tags subcommand
    tags = subparsers.add_parser(
        'tags', help='list desired labels and letters from volume tags'
    )
    tags.add_argument(
        '-t',
        '--tags',
        metavar='FILE',
        help='read tags from YAML file instead of EC2 API',
    )

    # remap subcommand
    remap = subparsers.add_parser(
        'remap', help='move volumes to desired drive letters'
    )
    remap.add_argument(
        '-n',
        '--dry-run',
        action='store_true',
        default=False,
        help='print changes without applying them',
    )
    remap.add_argument(
        '-t',
        '--tags',
        metavar='FILE',
        help='read tags from YAML file instead of EC2 API',
    )
    remap.add_argument(
        '--strict',
        action='store_true',
        default=False,
        help='exit with non-zero status if some volumes were not remapped',
    )

    return root


def _setup_logging(args: argparse.Namespace, config: Config) -> None:
    log_level = args.log_level or config['log']['level']
    if isinstance(log_level, str) and log_level.lower() in log_levels:
        logging.basicConfig(
            level=logging.getLevelNamesMapping()[log_level.upper()],
            filename=config['log']['file'],
            format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        )


def cli() -> None:
    """Run arguments parser."""
    root = get_parser()
    args = root.parse_args()
    if args.command is None:
        root.print_help()
        sys.exit()
    try:
        config = Config(args.config)
        _setup_logging(args, config)
        log.debug('CLI started with args: %s', args)
        if getattr(args, 'tags', None):
            config['tags']['file'] = os.path.abspath(args.tags)
        with Session(config) as session:
            main(session, args)
    except DrivemapError as e:
        sys.exit(f'error: {e}')
    except KeyboardInterrupt:
        sys.exit()


if __name__ == '__main__':
    cli()
