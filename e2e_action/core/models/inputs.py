"""
Action inputs — the flags that shape the test run.

Read once at process start from the ``INPUT_*`` environment variables
GitHub Actions sets for ``with:`` parameters (see
``e2e_action.core.config.inputs``).
"""

from __future__ import annotations

from pydantic import BaseModel


class ActionInputs(BaseModel):
    """Boolean/string configuration of a single action run."""

    percy: bool = False         # wrap the run in ``percy exec``
    run_tests: bool = True      # run the server-and-test step at all
    record: bool = False        # record to the Cypress dashboard
    parallel: bool = False      # load-balance specs across jobs
    headed: bool = False        # show the browser
    group: str = ""             # dashboard group name
