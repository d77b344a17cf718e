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

"""Parse ``package-lock.json`` into a dependency graph.

npm lockfiles v2 and v3 carry a flat ``packages`` map keyed by install
path. The root project lives under the empty key ``""`` and every
hoisted package under ``node_modules/<name>``::

    {
        "packages": {
            "": {"dependencies": {"@arm-debug/core": "^1.0.0"}},
            "node_modules/@arm-debug/core": {
                "version": "1.2.0",
                "dependencies": {"vscode-uri": "^3.0.0"}
            },
            "node_modules/vscode-uri": {"version": "3.0.8"}
        }
    }

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Lock graph          │ Every installed package, its exact version,    │
    │                     │ and the version ranges it asked for.           │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Hoisted package     │ A package installed at the top of              │
    │                     │ node_modules, shared by everyone who needs it. │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Nested package      │ A second copy living under another package's   │
    │                     │ own node_modules because of a version clash.   │
    └─────────────────────┴────────────────────────────────────────────────┘

Only hoisted packages are tracked; nested copies are skipped. Lockfiles
without a ``packages`` map (``lockfileVersion`` 1, written by npm 6 and
older) are rejected.

Usage::

    from tpipkit.lockfile import parse_package_lock

    graph = parse_package_lock(Path('package-lock.json'))
    graph.get('vscode-uri').version
    # → '3.0.8'
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tpipkit.errors import LockfileError
from tpipkit.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    'ROOT',
    'LockGraph',
    'LockedPackage',
    'parse_package_lock',
]

# Name under which the root project is stored in the graph.
ROOT = ''

_PREFIX = 'node_modules/'


@dataclass(frozen=True)
class LockedPackage:
    """A single installed package from the lockfile.

    Attributes:
        name: Package name (``''`` for the root project).
        version: Exact installed version. Empty when the lockfile does
            not record one (the root project, linked workspaces).
        dependencies: Direct runtime dependencies, name → version range.
    """

    name: str
    version: str = ''
    dependencies: dict[str, str] = field(default_factory=dict)


@dataclass
class LockGraph:
    """Parsed lockfile as a dependency graph.

    Attributes:
        packages: Map of package name → :class:`LockedPackage`.
    """

    packages: dict[str, LockedPackage] = field(default_factory=dict)

    def get(self, name: str) -> LockedPackage | None:
        """Look up *name*, logging an error when it is not installed."""
        package = self.packages.get(name)
        if package is None:
            logger.error('package_not_found', package=name or '<root>')
        return package


def _name_from_path(install_path: str) -> str | None:
    """Map a ``packages`` key to a package name, or ``None`` to skip it."""
    if install_path == '':
        return ROOT
    if not install_path.startswith(_PREFIX):
        # Workspace sources such as "packages/foo" are described again
        # by their "node_modules/foo" link entry.
        return None
    name = install_path[len(_PREFIX) :]
    if f'/{_PREFIX}' in name:
        return None
    return name


def _str_map(raw: object) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items()}


def _parse_packages(packages: dict[str, Any]) -> LockGraph:
    graph = LockGraph()
    skipped = 0
    for install_path, raw in packages.items():
        name = _name_from_path(install_path)
        if name is None:
            skipped += 1
            continue
        if not isinstance(raw, dict):
            continue
        graph.packages[name] = LockedPackage(
            name=name,
            version=str(raw.get('version', '')),
            dependencies=_str_map(raw.get('dependencies')),
        )
    if skipped:
        logger.debug('skipped_install_paths', count=skipped)
    return graph


def parse_package_lock(lock_path: Path) -> LockGraph:
    """Parse a ``package-lock.json`` file into a :class:`LockGraph`.

    Args:
        lock_path: Path to the lockfile.

    Returns:
        A :class:`LockGraph` with the root project and every hoisted
        package.

    Raises:
        LockfileError: If the file cannot be read, is not a JSON
            object, or has no ``packages`` map.
    """
    try:
        data = json.loads(lock_path.read_text(encoding='utf-8'))
    except OSError as exc:
        raise LockfileError(lock_path, f'cannot read lockfile: {exc.strerror or exc}') from exc
    except json.JSONDecodeError as exc:
        raise LockfileError(lock_path, f'invalid JSON: {exc.msg} (line {exc.lineno})') from exc

    if not isinstance(data, dict):
        raise LockfileError(lock_path, 'expected a JSON object')

    packages = data.get('packages')
    if not isinstance(packages, dict):
        version = data.get('lockfileVersion', 1)
        raise LockfileError(
            lock_path,
            f'no "packages" map (lockfileVersion {version}); regenerate it with npm 7 or newer',
        )
    graph = _parse_packages(packages)

    logger.debug(
        'parsed_package_lock',
        path=str(lock_path),
        lockfile_version=data.get('lockfileVersion'),
        total=len(graph.packages),
    )
    return graph
