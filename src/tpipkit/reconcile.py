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

r"""Reconcile the TPIP manifest with the resolved dependency set.

One pass, four steps, each producing :class:`Finding`\s:

1. **Placeholders**: entries with fields still marked ``<FIXME>``.
2. **Resolution**: walk the lock graph (see :mod:`tpipkit.resolver`).
3. **Missing**: resolved dependencies the manifest does not list are
   appended with whatever can be filled in automatically.
4. **Drift**: tracked versions are moved to the locked version, and
   the installed license is re-read for every entry that moved.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Severity 0          │ Informational: fixed automatically, nothing    │
    │                     │ for a human to do.                             │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Severity 1          │ Attention: a human must fill in or double-     │
    │                     │ check license information.                     │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Severity 2          │ New dependencies appeared, or the lock graph   │
    │                     │ could not be walked at all.                    │
    └─────────────────────┴────────────────────────────────────────────────┘

The process exit code is the highest severity seen.

Usage::

    from tpipkit.reconcile import reconcile

    report = reconcile(manifest, graph, node_modules=Path('node_modules'))
    write_manifest(path, report.manifest)
    sys.exit(report.exit_code)
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from tpipkit.errors import ResolutionError
from tpipkit.license import get_license
from tpipkit.lockfile import LockGraph
from tpipkit.logging import get_logger
from tpipkit.manifest import TpipDependency
from tpipkit.resolver import DEFAULT_INTERNAL_SCOPES, DEFAULT_SKIP_SCOPES, resolve_dependencies

logger = get_logger(__name__)

__all__ = [
    'EXIT_ATTENTION',
    'EXIT_FAILURE',
    'EXIT_OK',
    'Finding',
    'FindingKind',
    'ReconcileReport',
    'add_missing',
    'check_placeholders',
    'reconcile',
    'update_drift',
]

EXIT_OK = 0
EXIT_ATTENTION = 1
EXIT_FAILURE = 2

LicenseLookup = Callable[[str], str]


class FindingKind(str, enum.Enum):
    """What a reconciliation step found."""

    INCOMPLETE = 'incomplete'
    RESOLUTION_FAILED = 'resolution_failed'
    CONFLICT = 'conflict'
    MISSING = 'missing'
    VERSION_UPDATED = 'version_updated'
    LICENSE_CHANGED = 'license_changed'
    STALE = 'stale'


_SEVERITY: dict[FindingKind, int] = {
    FindingKind.INCOMPLETE: EXIT_ATTENTION,
    FindingKind.RESOLUTION_FAILED: EXIT_FAILURE,
    FindingKind.CONFLICT: EXIT_OK,
    FindingKind.MISSING: EXIT_FAILURE,
    FindingKind.VERSION_UPDATED: EXIT_OK,
    FindingKind.LICENSE_CHANGED: EXIT_ATTENTION,
    FindingKind.STALE: EXIT_OK,
}


@dataclass(frozen=True)
class Finding:
    """A single reconciliation result.

    Attributes:
        kind: What was found.
        package: Dependency name (``''`` for run-level findings).
        detail: Human-readable explanation.
        old: Previous value, for updates.
        new: New value, for updates and additions.
    """

    kind: FindingKind
    package: str
    detail: str = ''
    old: str = ''
    new: str = ''

    @property
    def severity(self) -> int:
        """Exit code contribution of this finding."""
        return _SEVERITY[self.kind]


@dataclass
class ReconcileReport:
    """Outcome of one reconciliation run.

    Attributes:
        manifest: The manifest entries, updated in place.
        findings: Everything that was found, in discovery order.
    """

    manifest: list[TpipDependency] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        """0 when clean, 1 when attention is needed, 2 on failure or missing deps."""
        return max((f.severity for f in self.findings), default=EXIT_OK)

    @property
    def needs_attention(self) -> bool:
        """``True`` if a human must edit the manifest."""
        return self.exit_code != EXIT_OK

    def of_kind(self, kind: FindingKind) -> list[Finding]:
        """Return the findings of *kind*."""
        return [f for f in self.findings if f.kind == kind]


# ── Steps ────────────────────────────────────────────────────────────


def check_placeholders(manifest: Sequence[TpipDependency]) -> list[Finding]:
    """Report every entry that still has fields to complete."""
    findings: list[Finding] = []
    for dep in manifest:
        missing_fields = dep.incomplete_fields()
        if missing_fields:
            logger.error('entry_needs_completion', package=dep.name, fields=missing_fields)
            findings.append(
                Finding(
                    kind=FindingKind.INCOMPLETE,
                    package=dep.name,
                    detail=f'{dep.name} needs to be completed ({", ".join(missing_fields)})',
                )
            )
    return findings


def add_missing(
    manifest: list[TpipDependency],
    resolved: Mapping[str, str],
    graph: LockGraph,
    license_lookup: LicenseLookup,
) -> list[Finding]:
    """Append an entry for every resolved dependency the manifest lacks.

    The version comes from the lock graph and the license from the
    installed package; ``spdx`` and ``url`` are left for a human.
    """
    tracked = {dep.name for dep in manifest}
    findings: list[Finding] = []
    for name in resolved:
        if name in tracked:
            continue
        locked = graph.get(name)
        version = locked.version if locked is not None and locked.version else None
        logger.error('missing_dependency', package=name, version=version)
        manifest.append(
            TpipDependency(
                name=name,
                version=version,
                spdx=None,
                url=None,
                license=license_lookup(name),
            )
        )
        tracked.add(name)
        findings.append(
            Finding(
                kind=FindingKind.MISSING,
                package=name,
                detail=f'{name} is not listed in the manifest',
                new=version or '',
            )
        )
    return findings


def update_drift(
    manifest: Sequence[TpipDependency],
    graph: LockGraph,
    license_lookup: LicenseLookup,
) -> list[Finding]:
    """Move tracked versions to the locked ones and re-check their licenses.

    A license is only re-read for entries whose version changed. A
    changed license is written to ``spdx`` and always reported.
    """
    findings: list[Finding] = []
    for dep in manifest:
        locked = graph.packages.get(dep.name)
        if locked is None:
            logger.warning('stale_manifest_entry', package=dep.name)
            findings.append(
                Finding(
                    kind=FindingKind.STALE,
                    package=dep.name,
                    detail=f'{dep.name} is no longer in the lockfile',
                )
            )
            continue
        if not locked.version or dep.version == locked.version:
            continue

        logger.info('version_updated', package=dep.name, old=dep.version, new=locked.version)
        findings.append(
            Finding(
                kind=FindingKind.VERSION_UPDATED,
                package=dep.name,
                old=dep.version or '',
                new=locked.version,
            )
        )
        dep.version = locked.version

        actual = license_lookup(dep.name)
        if dep.spdx != actual:
            logger.warning('license_may_have_changed', package=dep.name, old=dep.spdx, new=actual)
            findings.append(
                Finding(
                    kind=FindingKind.LICENSE_CHANGED,
                    package=dep.name,
                    detail='License may have changed!',
                    old=dep.spdx or '',
                    new=actual,
                )
            )
            dep.spdx = actual
    return findings


# ── Orchestrator ─────────────────────────────────────────────────────


def reconcile(
    manifest: list[TpipDependency],
    graph: LockGraph,
    *,
    node_modules: Path = Path('node_modules'),
    internal_scopes: Sequence[str] = DEFAULT_INTERNAL_SCOPES,
    skip_scopes: Sequence[str] = DEFAULT_SKIP_SCOPES,
    license_lookup: LicenseLookup | None = None,
) -> ReconcileReport:
    """Run the full reconciliation pass over *manifest*.

    Args:
        manifest: Manifest entries; mutated in place.
        graph: Parsed lockfile graph.
        node_modules: Where installed packages are read from.
        internal_scopes: Name prefixes inlined by the resolver.
        skip_scopes: Name prefixes ignored by the resolver.
        license_lookup: Override for reading installed licenses (for
            testing). Defaults to :func:`tpipkit.license.get_license`.

    Returns:
        A :class:`ReconcileReport` whose ``exit_code`` is the run status.
    """
    lookup = license_lookup or partial(get_license, node_modules=node_modules)
    report = ReconcileReport(manifest=manifest)
    report.findings.extend(check_placeholders(manifest))

    resolved: dict[str, str] = {}
    try:
        resolution = resolve_dependencies(
            graph,
            internal_scopes=internal_scopes,
            skip_scopes=skip_scopes,
        )
    except ResolutionError as exc:
        logger.error('resolution_failed', package=exc.package or '<root>', error=str(exc))
        report.findings.append(Finding(kind=FindingKind.RESOLUTION_FAILED, package=exc.package, detail=str(exc)))
    else:
        resolved = resolution.dependencies
        for conflict in resolution.conflicts:
            report.findings.append(
                Finding(
                    kind=FindingKind.CONFLICT,
                    package=conflict.name,
                    detail=f'Conflicting dependency version (requested by {conflict.requested_by or "<root>"})',
                    old=conflict.recorded,
                    new=conflict.requested,
                )
            )

    report.findings.extend(add_missing(manifest, resolved, graph, lookup))
    report.findings.extend(update_drift(manifest, graph, lookup))

    logger.info(
        'reconciled_manifest',
        entries=len(manifest),
        findings=len(report.findings),
        exit_code=report.exit_code,
    )
    return report
