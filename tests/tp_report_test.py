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

"""Tests for report rendering."""

from __future__ import annotations

import json
from io import StringIO

from rich.console import Console

from tpipkit.manifest import TpipDependency
from tpipkit.reconcile import Finding, FindingKind, ReconcileReport
from tpipkit.report import print_report, report_to_json


def _render(report: ReconcileReport) -> str:
    buf = StringIO()
    print_report(report, console=Console(file=buf, width=120))
    return buf.getvalue()


def _report(*findings: Finding) -> ReconcileReport:
    return ReconcileReport(
        manifest=[TpipDependency(name='yaml', version='2.3.4', spdx='ISC', url='u', license='l')],
        findings=list(findings),
    )


class TestPrintReport:
    """Tests for print_report."""

    def test_clean(self) -> None:
        """A clean report prints a single success line."""
        out = _render(_report())
        assert 'up to date' in out
        assert '1 entries' in out

    def test_findings_table(self) -> None:
        """Findings are listed with their kind and change."""
        out = _render(
            _report(Finding(kind=FindingKind.VERSION_UPDATED, package='yaml', old='2.2.0', new='2.3.4')),
        )
        assert 'yaml' in out
        assert 'version_updated' in out
        assert '2.2.0 → 2.3.4' in out
        assert 'manual input required' not in out

    def test_attention_diagnostics(self) -> None:
        """Findings needing attention get diagnostics and the hint."""
        out = _render(
            _report(
                Finding(kind=FindingKind.MISSING, package='chalk', detail='chalk is not listed in the manifest'),
                Finding(kind=FindingKind.LICENSE_CHANGED, package='yaml', old='MIT', new='ISC'),
            ),
        )
        assert 'error[missing]' in out
        assert 'warning[license_changed]' in out
        assert 'New or changed dependencies detected, manual input required.' in out
        assert 'npm run tpip:update' in out

    def test_markup_in_names_is_literal(self) -> None:
        """Square brackets in values are not treated as Rich markup."""
        out = _render(_report(Finding(kind=FindingKind.INCOMPLETE, package='[odd]', detail='[bold]x')))
        assert '[odd]' in out
        assert '[bold]x' in out


class TestReportToJson:
    """Tests for report_to_json."""

    def test_structure(self) -> None:
        """JSON output carries the exit code and every finding."""
        data = json.loads(
            report_to_json(_report(Finding(kind=FindingKind.INCOMPLETE, package='yaml', detail='needs work'))),
        )
        assert data['exit_code'] == 1
        assert data['entries'] == 1
        assert data['findings'] == [
            {
                'kind': 'incomplete',
                'package': 'yaml',
                'severity': 1,
                'detail': 'needs work',
                'old': '',
                'new': '',
            }
        ]
