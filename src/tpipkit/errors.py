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

"""Exception hierarchy for tpipkit.

Only conditions that stop a run are exceptions. Placeholder entries,
license drift and newly discovered dependencies are reported as
findings by :mod:`tpipkit.reconcile` instead.
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    'ConfigError',
    'LockfileError',
    'ManifestError',
    'ResolutionError',
    'TpipError',
]


class TpipError(Exception):
    """Base class for all tpipkit errors."""


class ConfigError(TpipError):
    """Raised when ``tpipkit.toml`` cannot be read or is malformed."""


class LockfileError(TpipError):
    """Raised when ``package-lock.json`` cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize with the offending path and a short reason."""
        self.path = path
        self.reason = reason
        super().__init__(f'{path}: {reason}')


class ManifestError(TpipError):
    """Raised when the TPIP manifest cannot be read or is malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize with the offending path and a short reason."""
        self.path = path
        self.reason = reason
        super().__init__(f'{path}: {reason}')


class ResolutionError(TpipError):
    """Raised when a package that must be traversed is not in the lock graph.

    Attributes:
        package: Name of the missing package (``''`` for the root).
    """

    def __init__(self, package: str) -> None:
        """Initialize with the name of the unresolvable package."""
        self.package = package
        label = package or '<root>'
        super().__init__(f'Cannot resolve transitive dependencies of {label}')
