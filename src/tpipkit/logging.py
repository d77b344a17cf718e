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

"""Structured logging for tpipkit.

Logs go through :mod:`structlog`, rendered by a stdlib handler on
stderr so that stdout stays free for the report (``--format json | jq``
keeps working). Two renderers are available: a console renderer,
colored on a TTY, and one JSON object per line for CI log scrapers.

npm publishing jobs run with registry and marketplace tokens in their
environment. Their values are masked in every log field by a
:class:`SecretRedactor`, unless ``TPIPKIT_REDACT_SECRETS=0`` is set.

Usage::

    from tpipkit.logging import configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger(__name__)
    log.info('resolved_dependencies', count=42)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

__all__ = [
    'REDACTED',
    'SecretRedactor',
    'configure_logging',
    'get_logger',
]

# Tokens a VS Code extension release job typically carries.
_SENSITIVE_ENV_VARS: tuple[str, ...] = (
    'NPM_TOKEN',
    'NODE_AUTH_TOKEN',
    'YARN_NPM_AUTH_TOKEN',
    'GITHUB_TOKEN',
    'GH_TOKEN',
    'VSCE_PAT',
    'OVSX_PAT',
    'ARTIFACTORY_API_KEY',
)

# Shorter values would mask ordinary words such as license names.
_MIN_SECRET_LENGTH = 8

REDACTED = '[REDACTED]'


class SecretRedactor:
    """Structlog processor that masks known secret values.

    Args:
        secrets: Values to mask. Empty and short values are dropped.
    """

    def __init__(self, secrets: Iterable[str]) -> None:
        self.secrets = frozenset(s for s in secrets if len(s) >= _MIN_SECRET_LENGTH)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> SecretRedactor:
        """Build a redactor from the sensitive variables of *environ*."""
        env = os.environ if environ is None else environ
        return cls(env.get(name, '') for name in _SENSITIVE_ENV_VARS)

    def scrub(self, value: object) -> object:
        """Return *value* with every secret replaced, if it is a string."""
        if not isinstance(value, str):
            return value
        for secret in self.secrets:
            value = value.replace(secret, REDACTED)
        return value

    def __call__(
        self,
        logger: Any,  # noqa: ANN401
        method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        if not self.secrets:
            return event_dict
        return {k: self.scrub(v) for k, v in event_dict.items()}


def _level(*, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    redact_secrets: bool = True,
) -> SecretRedactor | None:
    """Route structlog through a single stderr handler.

    Calling it again replaces the previous configuration, including
    for loggers that modules created at import time.

    Args:
        verbose: Enable debug-level output.
        quiet: Only warnings and errors. Wins over *verbose*.
        json_log: Render JSON lines instead of console output.
        redact_secrets: Mask sensitive env var values. The
            ``TPIPKIT_REDACT_SECRETS=0`` env var also turns this off.

    Returns:
        The installed :class:`SecretRedactor`, or ``None`` when
        redaction is off.
    """
    redactor: SecretRedactor | None = None
    if redact_secrets and os.environ.get('TPIPKIT_REDACT_SECRETS', '1') != '0':
        redactor = SecretRedactor.from_environ()

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
    ]
    if redactor is not None:
        processors.append(redactor)

    if json_log:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_level(verbose=verbose, quiet=quiet))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return redactor


def get_logger(name: str = 'tpipkit') -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the stdlib logger *name*."""
    return structlog.get_logger(name)
