"""
Action inputs — read ``with:`` parameters from the environment.

GitHub Actions exposes each input as ``INPUT_<NAME>``: the name is
upper-cased and spaces become underscores. Anything else about the
value (booleans, defaults) is up to the action.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from e2e_action.core.models.inputs import ActionInputs

_TRUE = ("true", "1")
_FALSE = ("false", "0")


def _env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, environ: Mapping[str, str] | None = None) -> str:
    """Return the raw input value, stripped, or ``""`` when unset."""
    env = os.environ if environ is None else environ
    return env.get(_env_name(name), "").strip()


def get_input_bool(
    name: str,
    default: bool = False,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Grab a boolean input and cast it.

    ``true``/``1`` and ``false``/``0`` are recognised; anything else,
    including a missing input, yields ``default``.
    """
    param = get_input(name, environ)
    if param in _TRUE:
        return True
    if param in _FALSE:
        return False
    return default


def load_inputs(
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ActionInputs:
    """Build ActionInputs from the environment.

    Args:
        environ: Environment to read (default: ``os.environ``).
        overrides: Field values that win over the environment, e.g.
            from CLI flags. ``None`` values are ignored.
    """
    values: dict[str, Any] = {
        "percy": get_input_bool("percy", environ=environ),
        "run_tests": get_input_bool("runTests", True, environ=environ),
        "record": get_input_bool("record", environ=environ),
        "parallel": get_input_bool("parallel", environ=environ),
        "headed": get_input_bool("headed", environ=environ),
        "group": get_input("group", environ),
    }
    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})
    return ActionInputs(**values)
