# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Command-line entry point.

Usage::

    tpipkit update-tpip TPIP.json
    tpipkit update-tpip TPIP.json --lock-file app/package-lock.json --dry-run
    tpipkit update-tpip TPIP.json --format json -q

Exit codes:
    0: The manifest matches the lockfile.
    1: Placeholders remain or a license changed; edit the manifest.
    2: New dependencies were added, or the lockfile could not be walked.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console

from tpipkit.config import load_config
from tpipkit.errors import TpipError
from tpipkit.lockfile import parse_package_lock
from tpipkit.logging import configure_logging, get_logger
from tpipkit.manifest import load_manifest, write_manifest
from tpipkit.reconcile import EXIT_FAILURE, reconcile
from tpipkit.report import print_report, report_to_json

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the ``tpipkit`` argument parser."""
    parser = argparse.ArgumentParser(
        prog='tpipkit',
        description='Keep a third-party license (TPIP) manifest in sync with package-lock.json.',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging.')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Emit logs as JSON lines on stderr.')
    parser.add_argument('--config', type=Path, default=None, help='Path to tpipkit.toml.')

    sub = parser.add_subparsers(dest='command', required=True)
    update = sub.add_parser('update-tpip', help='Reconcile the manifest with the lockfile and rewrite it.')
    update.add_argument('manifest', type=Path, help='Path to the TPIP manifest JSON file.')
    update.add_argument('--lock-file', type=Path, default=None, help='Lockfile to read (default: package-lock.json).')
    update.add_argument('--node-modules', type=Path, default=None, help='Installed packages (default: node_modules).')
    update.add_argument(
        '--internal-scope',
        action='append',
        dest='internal_scopes',
        default=None,
        help='Package prefix to inline instead of tracking (repeatable).',
    )
    update.add_argument('--dry-run', action='store_true', help='Report findings without rewriting the manifest.')
    update.add_argument('--format', choices=('text', 'json'), default='text', help='Report format on stdout.')
    return parser


def _update_tpip(args: argparse.Namespace) -> int:
    config = load_config(args.config).with_overrides(
        lock_file=args.lock_file,
        node_modules=args.node_modules,
        internal_scopes=tuple(args.internal_scopes) if args.internal_scopes else None,
    )
    logger.info('updating_tpip', manifest=str(args.manifest), lock_file=str(config.lock_file))

    manifest = load_manifest(args.manifest)
    graph = parse_package_lock(config.lock_file)
    report = reconcile(
        manifest,
        graph,
        node_modules=config.node_modules,
        internal_scopes=config.internal_scopes,
        skip_scopes=config.skip_scopes,
    )

    if args.dry_run:
        logger.info('dry_run', manifest=str(args.manifest), written=False)
    else:
        write_manifest(args.manifest, report.manifest)

    if args.format == 'json':
        print(report_to_json(report))  # noqa: T201
    else:
        print_report(report, console=Console())
    return report.exit_code


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        return _update_tpip(args)
    except TpipError as exc:
        logger.error('update_failed', error=str(exc))
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
