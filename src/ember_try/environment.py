"""Process environment scoping for the running scenario."""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from .models import CURRENT_SCENARIO_ENV_VAR


@contextmanager
def scenario_environment(name: str, env_var: str = CURRENT_SCENARIO_ENV_VAR) -> Iterator[None]:
    """Expose the scenario name to the command for the duration of the block.

    The previous value (or its absence) is restored on exit, including when
    the block raises.

    Args:
        name: Scenario name
        env_var: Variable to set
    """
    previous = os.environ.get(env_var)
    os.environ[env_var] = name
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop(env_var, None)
        else:
            os.environ[env_var] = previous
