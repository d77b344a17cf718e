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

"""Render a :class:`~tpipkit.reconcile.ReconcileReport` for humans or machines."""

from __future__ import annotations

import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from tpipkit.reconcile import EXIT_ATTENTION, EXIT_FAILURE, Finding, FindingKind, ReconcileReport

__all__ = [
    'print_report',
    'report_to_json',
]

_KIND_STYLE: dict[FindingKind, tuple[str, str]] = {
    FindingKind.INCOMPLETE: ('✗', 'bold yellow'),
    FindingKind.RESOLUTION_FAILED: ('✘', 'bold red'),
    FindingKind.CONFLICT: ('~', 'dim'),
    FindingKind.MISSING: ('+', 'bold red'),
    FindingKind.VERSION_UPDATED: ('↑', 'green'),
    FindingKind.LICENSE_CHANGED: ('!', 'bold yellow'),
    FindingKind.STALE: ('-', 'dim'),
}


def _change(f: Finding) -> str:
    if f.old or f.new:
        return f'{f.old or "(none)"} → {f.new or "(none)"}'
    return ''


def print_report(
    report: ReconcileReport,
    *,
    console: Console | None = None,
) -> None:
    """Print *report* as a Rich table followed by diagnostics.

    Args:
        report: The reconciliation outcome.
        console: Rich :class:`Console` to print to.  When ``None``,
            a default ``Console()`` is created (auto-detects TTY).
    """
    if console is None:
        console = Console()

    if not report.findings:
        console.print(f'[bold green]✓ TPIP manifest is up to date ({len(report.manifest)} entries).[/]')
        return

    table = Table(title='TPIP reconciliation', show_lines=False)
    table.add_column('Package', style='bold')
    table.add_column('Finding')
    table.add_column('Change')
    table.add_column('Detail')

    for f in report.findings:
        icon, style = _KIND_STYLE[f.kind]
        table.add_row(
            Text(f.package or '<root>'),
            Text(f'{icon} {f.kind.value}', style=style),
            Text(_change(f)),
            Text(f.detail),
        )

    console.print(table)

    attention = [f for f in report.findings if f.severity >= EXIT_ATTENTION]
    if attention:
        console.print()
        for f in attention:
            if f.severity >= EXIT_FAILURE:
                console.print(f'[bold red]error\\[{f.kind.value}][/][bold]: {escape(f.package or "<root>")}[/]')
            else:
                console.print(f'[bold yellow]warning\\[{f.kind.value}][/][bold]: {escape(f.package)}[/]')
            if f.detail:
                console.print(f'   [cyan]=[/] [bold]note[/]: {escape(f.detail)}')
        console.print()

    if report.needs_attention:
        console.print('[bold red]New or changed dependencies detected, manual input required.[/]')
        console.print('   [cyan]=[/] [green]help[/]: run `npm run tpip:update` locally and add missing license information')


def report_to_json(report: ReconcileReport, *, indent: int = 2) -> str:
    """Serialize *report* to JSON."""
    payload = {
        'exit_code': report.exit_code,
        'entries': len(report.manifest),
        'findings': [
            {
                'kind': f.kind.value,
                'package': f.package,
                'severity': f.severity,
                'detail': f.detail,
                'old': f.old,
                'new': f.new,
            }
            for f in report.findings
        ],
    }
    return json.dumps(payload, indent=indent)
