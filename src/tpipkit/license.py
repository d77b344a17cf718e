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

"""Read the declared license of an installed npm package.

The value comes from ``node_modules/<name>/package.json`` and is
returned verbatim; it is usually, but not always, an SPDX expression.
"""

from __future__ import annotations

import json
from pathlib import Path

from tpipkit._types import UNKNOWN_LICENSE, DetectedLicense
from tpipkit.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    'detect_installed_license',
    'get_license',
]


def detect_installed_license(name: str, node_modules: Path) -> DetectedLicense | None:
    """Extract the license declared by the installed package *name*.

    Checks (in order):
        1. ``"license": "MIT"`` (or an SPDX expression).
        2. ``"license": {"type": "MIT"}`` (legacy object form).
        3. ``"licenses": [{"type": "MIT"}]`` (deprecated array form).

    Args:
        name: Package name, possibly scoped (``@scope/pkg``).
        node_modules: The ``node_modules`` directory to look in.

    Returns:
        The detected license, an empty :class:`DetectedLicense` if the
        manifest declares none, or ``None`` if there is no readable
        ``package.json``.
    """
    pj = node_modules / name / 'package.json'
    if not pj.is_file():
        return None
    try:
        data = json.loads(pj.read_text(encoding='utf-8'))
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning('unreadable_package_json', package=name, error=str(exc))
        return None
    if not isinstance(data, dict):
        return None

    lic = data.get('license')
    if isinstance(lic, str) and lic.strip():
        return DetectedLicense(value=lic.strip(), source='package.json', package_name=name)

    if isinstance(lic, dict):
        lic_type = lic.get('type', '')
        if isinstance(lic_type, str) and lic_type.strip():
            return DetectedLicense(value=lic_type.strip(), source='package.json license.type', package_name=name)

    licenses = data.get('licenses')
    if isinstance(licenses, list) and licenses:
        first = licenses[0]
        if isinstance(first, dict):
            lic_type = first.get('type', '')
            if isinstance(lic_type, str) and lic_type.strip():
                return DetectedLicense(
                    value=lic_type.strip(),
                    source='package.json licenses[0].type',
                    package_name=name,
                )

    return DetectedLicense(value='', source='package.json', package_name=name)


def get_license(name: str, node_modules: Path) -> str:
    """Return the declared license of *name*, or ``UNKNOWN``."""
    detected = detect_installed_license(name, node_modules)
    if detected is None:
        logger.warning('no_package_json', package=name, hint='license cannot be detected')
        return UNKNOWN_LICENSE
    if not detected.found:
        logger.warning('no_declared_license', package=name)
        return UNKNOWN_LICENSE
    logger.debug('detected_license', package=name, license=detected.value, source=detected.source)
    return detected.value
