"""Configuration consumed by the generator.

The only setting is the library short name. Resolution order:

1. An explicit value (``--lib-name`` on the command line)
2. The ``ABIKIT_LIB_NAME`` environment variable
3. :data:`DEFAULT_LIB_NAME`
"""

from __future__ import annotations

import logging
import os
import re

logger = logging.getLogger(__name__)

DEFAULT_LIB_NAME = "backend"

LIB_NAME_ENV_VAR = "ABIKIT_LIB_NAME"

_LIB_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")


def is_valid_lib_name(name: str) -> bool:
    """True if ``name`` can be used as a header directory and file stem."""
    return bool(_LIB_NAME_RE.match(name))


def resolve_lib_name(explicit: str | None = None) -> str:
    """Pick the library name to generate headers for.

    An explicit value is trusted only if valid; an invalid explicit value
    raises, an invalid environment value is ignored with a warning.

    :raises ValueError: If ``explicit`` is not a valid library name.
    """
    if explicit is not None:
        if not is_valid_lib_name(explicit):
            raise ValueError(f"Invalid library name: {explicit!r}")
        return explicit

    env_name = os.environ.get(LIB_NAME_ENV_VAR)
    if env_name:
        stripped = env_name.strip()
        if is_valid_lib_name(stripped):
            return stripped
        logger.warning("%s=%r is not a valid library name, ignoring", LIB_NAME_ENV_VAR, env_name)

    return DEFAULT_LIB_NAME
