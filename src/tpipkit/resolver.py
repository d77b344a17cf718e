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

"""Resolve the third-party dependencies a project actually ships.

Packages from an internal scope (``@arm-debug/...`` by default) are
not third-party: they are inlined, and *their* dependencies are
collected as if the root project had declared them. Type-definition
packages (``@types/...``) never ship at runtime and are skipped.
Everything else is recorded once, with the version range under which
it was first seen::

    root ──┬── @arm-debug/core ──┬── vscode-uri ^3.0.0   → recorded
           │                     └── @types/node         → skipped
           ├── vscode-uri ^3.0.8                          → conflict warning
           └── yaml ^2.3.0                                → recorded

Usage::

    from tpipkit.resolver import resolve_dependencies

    resolution = resolve_dependencies(graph)
    resolution.dependencies
    # → {'vscode-uri': '^3.0.0', 'yaml': '^2.3.0'}
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from tpipkit.errors import ResolutionError
from tpipkit.lockfile import ROOT, LockGraph
from tpipkit.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    'DEFAULT_INTERNAL_SCOPES',
    'DEFAULT_SKIP_SCOPES',
    'Resolution',
    'VersionConflict',
    'resolve_dependencies',
]

DEFAULT_INTERNAL_SCOPES: tuple[str, ...] = ('@arm-debug',)
DEFAULT_SKIP_SCOPES: tuple[str, ...] = ('@types',)


@dataclass(frozen=True)
class VersionConflict:
    """Two packages asked for the same dependency with different ranges.

    Attributes:
        name: The dependency name.
        recorded: The range that was kept (first seen).
        requested: The range requested later by *requested_by*.
        requested_by: Package whose dependency list held *requested*.
    """

    name: str
    recorded: str
    requested: str
    requested_by: str


@dataclass
class Resolution:
    """Accumulator for one resolver run.

    Attributes:
        dependencies: Third-party dependency name → version range.
        conflicts: Range mismatches seen along the way.
        visited: Internal packages (and the root) already expanded.
    """

    dependencies: dict[str, str] = field(default_factory=dict)
    conflicts: list[VersionConflict] = field(default_factory=list)
    visited: set[str] = field(default_factory=set)

    def record(self, name: str, version_range: str, requested_by: str) -> None:
        """Record *name* unless present; warn when the range differs."""
        recorded = self.dependencies.get(name)
        if recorded is None:
            self.dependencies[name] = version_range
            return
        if recorded != version_range:
            logger.warning(
                'conflicting_dependency_version',
                dependency=name,
                recorded=recorded,
                requested=version_range,
                requested_by=requested_by or '<root>',
            )
            self.conflicts.append(
                VersionConflict(
                    name=name,
                    recorded=recorded,
                    requested=version_range,
                    requested_by=requested_by,
                )
            )


def _in_scope(name: str, scopes: Sequence[str]) -> bool:
    return any(name.startswith(scope) for scope in scopes)


def _expand(
    graph: LockGraph,
    name: str,
    resolution: Resolution,
    internal_scopes: Sequence[str],
    skip_scopes: Sequence[str],
) -> None:
    if name in resolution.visited:
        logger.debug('already_expanded', package=name or '<root>')
        return
    resolution.visited.add(name)

    package = graph.get(name)
    if package is None:
        raise ResolutionError(name)

    for dep, version_range in package.dependencies.items():
        if _in_scope(dep, internal_scopes):
            _expand(graph, dep, resolution, internal_scopes, skip_scopes)
        elif not _in_scope(dep, skip_scopes):
            resolution.record(dep, version_range, requested_by=name)


def resolve_dependencies(
    graph: LockGraph,
    root: str = ROOT,
    *,
    internal_scopes: Sequence[str] = DEFAULT_INTERNAL_SCOPES,
    skip_scopes: Sequence[str] = DEFAULT_SKIP_SCOPES,
) -> Resolution:
    """Collect the flattened third-party dependencies of *root*.

    Args:
        graph: Parsed lockfile graph.
        root: Package to start from; the root project by default.
        internal_scopes: Name prefixes whose packages are inlined.
        skip_scopes: Name prefixes whose packages are ignored.

    Returns:
        A :class:`Resolution` with the dependency map and any conflicts.

    Raises:
        ResolutionError: If *root* or an internal package reached from
            it is not in the lock graph.
    """
    resolution = Resolution()
    _expand(graph, root, resolution, internal_scopes, skip_scopes)
    logger.debug(
        'resolved_dependencies',
        count=len(resolution.dependencies),
        internal=len(resolution.visited) - 1,
        conflicts=len(resolution.conflicts),
    )
    return resolution
