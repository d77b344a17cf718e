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

"""Read and write the tracked TPIP manifest.

The manifest is a JSON array with one object per third-party
dependency::

    [
        {
            "name": "vscode-uri",
            "version": "3.0.8",
            "spdx": "MIT",
            "url": "https://github.com/microsoft/vscode-uri",
            "license": "https://github.com/microsoft/vscode-uri/blob/main/LICENSE.md"
        }
    ]

A field that still needs a human to fill it in is stored on disk as
the ``<FIXME>`` placeholder. In memory such a field is ``None``, so a
real value can never be mistaken for the marker.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tpipkit._types import PLACEHOLDER
from tpipkit.errors import ManifestError
from tpipkit.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    'TRACKED_FIELDS',
    'TpipDependency',
    'dump_manifest',
    'load_manifest',
    'write_manifest',
]

# Fields that must be filled in before a manifest entry is complete.
TRACKED_FIELDS: tuple[str, ...] = ('version', 'spdx', 'url', 'license')


@dataclass
class TpipDependency:
    """One entry of the TPIP manifest.

    Attributes:
        name: Package name as it appears in ``package-lock.json``.
        version: Tracked version, or ``None`` if it needs completion.
        spdx: SPDX license identifier, or ``None``.
        url: Project homepage or repository URL, or ``None``.
        license: Link to (or name of) the license text, or ``None``.
        extra: Any other keys of the JSON object, kept as-is and
            written back after the tracked fields.
    """

    name: str
    version: str | None = None
    spdx: str | None = None
    url: str | None = None
    license: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def incomplete_fields(self) -> list[str]:
        """Return the names of tracked fields that still need completion."""
        return [f for f in TRACKED_FIELDS if getattr(self, f) is None]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TpipDependency:
        """Build an entry from its JSON form, mapping placeholders to ``None``."""
        values = {f: _from_json(data.get(f)) for f in TRACKED_FIELDS}
        extra = {k: v for k, v in data.items() if k != 'name' and k not in TRACKED_FIELDS}
        return cls(name=data['name'], **values, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, writing ``None`` back as the placeholder."""
        record: dict[str, Any] = {'name': self.name}
        for f in TRACKED_FIELDS:
            value = getattr(self, f)
            record[f] = PLACEHOLDER if value is None else value
        record.update(self.extra)
        return record


def _from_json(value: object) -> str | None:
    if value is None or value == PLACEHOLDER:
        return None
    return str(value)


def load_manifest(path: Path) -> list[TpipDependency]:
    """Load the TPIP manifest at *path*.

    Args:
        path: Path to the manifest JSON file.

    Returns:
        Manifest entries in file order.

    Raises:
        ManifestError: If the file is missing, is not valid JSON, is
            not an array, or contains an entry without a ``name``.
    """
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except OSError as exc:
        raise ManifestError(path, f'cannot read manifest: {exc.strerror or exc}') from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(path, f'invalid JSON: {exc.msg} (line {exc.lineno})') from exc

    if not isinstance(data, list):
        raise ManifestError(path, 'expected a JSON array of dependencies')

    deps: list[TpipDependency] = []
    for index, raw in enumerate(data):
        if not isinstance(raw, dict) or not isinstance(raw.get('name'), str) or not raw['name']:
            raise ManifestError(path, f'entry #{index} has no package name')
        deps.append(TpipDependency.from_dict(raw))

    logger.debug('loaded_manifest', path=str(path), entries=len(deps))
    return deps


def dump_manifest(deps: list[TpipDependency]) -> str:
    """Serialize *deps* as 4-space indented JSON (no trailing newline)."""
    return json.dumps([d.to_dict() for d in deps], indent=4, ensure_ascii=False)


def write_manifest(path: Path, deps: list[TpipDependency]) -> None:
    """Overwrite the manifest at *path* with *deps*.

    Raises:
        ManifestError: If the file cannot be written.
    """
    try:
        path.write_text(dump_manifest(deps), encoding='utf-8')
    except OSError as exc:
        raise ManifestError(path, f'cannot write manifest: {exc.strerror or exc}') from exc
    logger.debug('wrote_manifest', path=str(path), entries=len(deps))
