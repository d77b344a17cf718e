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

"""Tests for third-party dependency resolution."""

from __future__ import annotations

import pytest
from tpipkit.errors import ResolutionError
from tpipkit.lockfile import ROOT, LockedPackage, LockGraph
from tpipkit.resolver import Resolution, resolve_dependencies

# ── Helpers ──────────────────────────────────────────────────────────


def _graph(*packages: tuple[str, str, dict[str, str]]) -> LockGraph:
    """Build a LockGraph from (name, version, dependencies) triples."""
    graph = LockGraph()
    for name, version, deps in packages:
        graph.packages[name] = LockedPackage(name=name, version=version, dependencies=deps)
    return graph


# ── resolve_dependencies ─────────────────────────────────────────────


class TestResolveFlat:
    """Resolution without internal packages."""

    def test_direct_dependencies_only(self) -> None:
        """Without internal packages the result is the direct deps."""
        graph = _graph(
            (ROOT, '1.0.0', {'yaml': '^2.3.0', 'vscode-uri': '^3.0.0'}),
            ('yaml', '2.3.4', {}),
            ('vscode-uri', '3.0.8', {}),
        )
        assert resolve_dependencies(graph).dependencies == {'yaml': '^2.3.0', 'vscode-uri': '^3.0.0'}

    def test_type_packages_skipped(self) -> None:
        """@types packages are not third-party runtime dependencies."""
        graph = _graph(
            (ROOT, '1.0.0', {'@types/vscode': '^1.80.0', 'yaml': '^2.3.0'}),
            ('yaml', '2.3.4', {}),
        )
        assert resolve_dependencies(graph).dependencies == {'yaml': '^2.3.0'}

    def test_transitive_third_party_not_followed(self) -> None:
        """Dependencies of third-party packages are not collected."""
        graph = _graph(
            (ROOT, '1.0.0', {'chalk': '^4.0.0'}),
            ('chalk', '4.1.2', {'ansi-styles': '^4.1.0'}),
            ('ansi-styles', '4.3.0', {}),
        )
        assert resolve_dependencies(graph).dependencies == {'chalk': '^4.0.0'}

    def test_direct_dependency_not_installed_is_recorded(self) -> None:
        """Third-party deps are recorded even when the lock graph lacks them."""
        graph = _graph((ROOT, '1.0.0', {'yaml': '^2.3.0'}))
        assert resolve_dependencies(graph).dependencies == {'yaml': '^2.3.0'}

    def test_empty_root(self) -> None:
        """A root without dependencies resolves to nothing."""
        assert resolve_dependencies(_graph((ROOT, '1.0.0', {}))).dependencies == {}


class TestResolveInternal:
    """Resolution through internal-scope packages."""

    def test_internal_package_inlined(self) -> None:
        """Internal packages are replaced by their own dependencies."""
        graph = _graph(
            (ROOT, '1.0.0', {'@arm-debug/core': '^1.0.0', 'yaml': '^2.3.0'}),
            ('@arm-debug/core', '1.2.0', {'vscode-uri': '^3.0.0', '@types/node': '^20.0.0'}),
            ('vscode-uri', '3.0.8', {}),
            ('yaml', '2.3.4', {}),
        )
        result = resolve_dependencies(graph).dependencies
        assert result == {'vscode-uri': '^3.0.0', 'yaml': '^2.3.0'}
        assert '@arm-debug/core' not in result

    def test_nested_internal_packages(self) -> None:
        """Internal packages are followed to any depth."""
        graph = _graph(
            (ROOT, '1.0.0', {'@arm-debug/a': '1'}),
            ('@arm-debug/a', '1.0.0', {'@arm-debug/b': '1'}),
            ('@arm-debug/b', '1.0.0', {'@arm-debug/c': '1'}),
            ('@arm-debug/c', '1.0.0', {'deep': '^0.1.0'}),
        )
        assert resolve_dependencies(graph).dependencies == {'deep': '^0.1.0'}

    def test_cycle_terminates(self) -> None:
        """A cycle between internal packages is expanded once."""
        graph = _graph(
            (ROOT, '1.0.0', {'@arm-debug/a': '1'}),
            ('@arm-debug/a', '1.0.0', {'@arm-debug/b': '1', 'x': '^1.0.0'}),
            ('@arm-debug/b', '1.0.0', {'@arm-debug/a': '1', 'y': '^2.0.0'}),
        )
        resolution = resolve_dependencies(graph)
        assert resolution.dependencies == {'x': '^1.0.0', 'y': '^2.0.0'}
        assert resolution.visited == {ROOT, '@arm-debug/a', '@arm-debug/b'}

    def test_custom_scopes(self) -> None:
        """Internal and skipped scopes are configurable."""
        graph = _graph(
            (ROOT, '1.0.0', {'@acme/lib': '1', '@arm-debug/core': '1', '@types/node': '20'}),
            ('@acme/lib', '1.0.0', {'lodash': '^4.17.0'}),
        )
        result = resolve_dependencies(graph, internal_scopes=('@acme',), skip_scopes=('@arm-debug',))
        assert result.dependencies == {'lodash': '^4.17.0', '@types/node': '20'}

    def test_missing_internal_package_raises(self) -> None:
        """An internal package absent from the lock graph is fatal."""
        graph = _graph((ROOT, '1.0.0', {'@arm-debug/gone': '^1.0.0'}))
        with pytest.raises(ResolutionError) as excinfo:
            resolve_dependencies(graph)
        assert excinfo.value.package == '@arm-debug/gone'

    def test_missing_root_raises(self) -> None:
        """A lock graph without a root entry is fatal."""
        with pytest.raises(ResolutionError, match='<root>'):
            resolve_dependencies(LockGraph())

    def test_explicit_root(self) -> None:
        """Resolution can start from any package."""
        graph = _graph(
            (ROOT, '1.0.0', {}),
            ('@arm-debug/core', '1.2.0', {'yaml': '^2.0.0'}),
        )
        assert resolve_dependencies(graph, '@arm-debug/core').dependencies == {'yaml': '^2.0.0'}


class TestConflicts:
    """Version range conflicts."""

    def test_first_seen_range_wins(self) -> None:
        """The range recorded first is kept; later ones are reported."""
        graph = _graph(
            (ROOT, '1.0.0', {'@arm-debug/core': '1', 'vscode-uri': '^3.0.8'}),
            ('@arm-debug/core', '1.2.0', {'vscode-uri': '^3.0.0'}),
        )
        resolution = resolve_dependencies(graph)
        assert resolution.dependencies == {'vscode-uri': '^3.0.0'}
        (conflict,) = resolution.conflicts
        assert conflict.name == 'vscode-uri'
        assert conflict.recorded == '^3.0.0'
        assert conflict.requested == '^3.0.8'
        assert conflict.requested_by == ROOT

    def test_same_range_is_not_a_conflict(self) -> None:
        """Identical ranges from two packages are fine."""
        graph = _graph(
            (ROOT, '1.0.0', {'@arm-debug/a': '1', '@arm-debug/b': '1'}),
            ('@arm-debug/a', '1.0.0', {'yaml': '^2.3.0'}),
            ('@arm-debug/b', '1.0.0', {'yaml': '^2.3.0'}),
        )
        assert resolve_dependencies(graph).conflicts == []


class TestResolution:
    """Tests for the Resolution accumulator."""

    def test_record_new(self) -> None:
        """A new name is stored."""
        r = Resolution()
        r.record('yaml', '^2.0.0', requested_by=ROOT)
        assert r.dependencies == {'yaml': '^2.0.0'}

    def test_record_conflict(self) -> None:
        """A different range is kept out and reported."""
        r = Resolution()
        r.record('yaml', '^2.0.0', requested_by=ROOT)
        r.record('yaml', '^1.0.0', requested_by='@arm-debug/x')
        assert r.dependencies == {'yaml': '^2.0.0'}
        assert len(r.conflicts) == 1
