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

"""Load tpipkit settings from ``tpipkit.toml``.

All keys are optional::

    lock_file = "package-lock.json"
    node_modules = "node_modules"
    internal_scopes = ["@arm-debug"]
    skip_scopes = ["@types"]

The same keys may live under ``[tool.tpipkit]`` in a ``pyproject.toml``.
Relative paths are resolved against the working directory, not the
config file, so the tool behaves the same when invoked from an npm
script. Command-line flags override file values.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from tpipkit.errors import ConfigError
from tpipkit.logging import get_logger
from tpipkit.resolver import DEFAULT_INTERNAL_SCOPES, DEFAULT_SKIP_SCOPES

logger = get_logger(__name__)

__all__ = [
    'CONFIG_FILENAME',
    'TpipConfig',
    'load_config',
]

CONFIG_FILENAME = 'tpipkit.toml'


@dataclass(frozen=True)
class TpipConfig:
    """Resolved tpipkit settings.

    Attributes:
        lock_file: Path to ``package-lock.json``.
        node_modules: Directory holding installed packages.
        internal_scopes: Name prefixes whose packages are inlined.
        skip_scopes: Name prefixes whose packages are ignored.
    """

    lock_file: Path = Path('package-lock.json')
    node_modules: Path = Path('node_modules')
    internal_scopes: tuple[str, ...] = DEFAULT_INTERNAL_SCOPES
    skip_scopes: tuple[str, ...] = DEFAULT_SKIP_SCOPES

    def with_overrides(self, **overrides: Any) -> TpipConfig:  # noqa: ANN401
        """Return a copy with every non-``None`` override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


_PATH_KEYS = frozenset({'lock_file', 'node_modules'})
_LIST_KEYS = frozenset({'internal_scopes', 'skip_scopes'})


def _coerce(path: Path, table: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(TpipConfig)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise ConfigError(f'{path}: unknown key(s): {", ".join(unknown)}')

    values: dict[str, Any] = {}
    for key, value in table.items():
        if key in _PATH_KEYS:
            if not isinstance(value, str) or not value:
                raise ConfigError(f'{path}: {key} must be a non-empty string')
            values[key] = Path(value)
        elif key in _LIST_KEYS:
            if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
                raise ConfigError(f'{path}: {key} must be a list of non-empty strings')
            values[key] = tuple(value)
    return values


def load_config(path: Path | None = None) -> TpipConfig:
    """Load settings from *path*, or from the working directory.

    Without an explicit *path*, ``tpipkit.toml`` is tried first and then
    the ``[tool.tpipkit]`` table of ``pyproject.toml``. A missing file
    yields the defaults; an explicit *path* that does not exist is an
    error.

    Raises:
        ConfigError: If the file is unreadable, is not valid TOML, or
            holds unknown keys or values of the wrong type.
    """
    if path is None:
        for candidate in (Path(CONFIG_FILENAME), Path('pyproject.toml')):
            if candidate.is_file():
                path = candidate
                break
        else:
            logger.debug('config_not_found', using='defaults')
            return TpipConfig()
    elif not path.is_file():
        raise ConfigError(f'{path}: config file not found')

    try:
        with path.open('rb') as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f'{path}: invalid TOML: {exc}') from exc
    except OSError as exc:
        raise ConfigError(f'{path}: cannot read config: {exc}') from exc

    if path.name == 'pyproject.toml':
        table = data.get('tool', {}).get('tpipkit', {})
    else:
        table = data
    if not isinstance(table, dict):
        raise ConfigError(f'{path}: expected a table of settings')

    config = TpipConfig(**_coerce(path, table))
    logger.debug('loaded_config', path=str(path), config=str(config))
    return config
