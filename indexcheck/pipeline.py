"""Verification pipeline — resolve, load, fetch, reconcile.

The pipeline is one sequence with a single suspension point, the fetch of
observed state. Fatal errors (``ConfigurationError``, ``SpecParseError``,
``StateFetchError``) propagate to the caller unretried; mismatches are
returned as data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from indexcheck.config import DEFAULT_FETCH_TIMEOUT, resolve_environment
from indexcheck.fetcher import StateFetcher, fetch_with_timeout
from indexcheck.models import IndexDefinition, ReconciliationResult
from indexcheck.reconciler import reconcile
from indexcheck.spec.loader import load_specification

logger = logging.getLogger(__name__)


@dataclass
class VerificationOutcome:
    """Everything a completed verification run produced."""

    environment: str
    project_id: str
    expected: list[IndexDefinition]
    result: ReconciliationResult

    @property
    def passed(self) -> bool:
        return self.result.passed


class IndexVerifier:
    """Runs index verification against one observed-state source."""

    def __init__(
        self,
        fetcher: StateFetcher,
        firebaserc_path: str | Path = ".firebaserc",
        fetch_timeout: float | None = DEFAULT_FETCH_TIMEOUT,
    ):
        self.fetcher = fetcher
        self.firebaserc_path = Path(firebaserc_path)
        self.fetch_timeout = fetch_timeout

    async def verify(self, environment: str, indexes_path: str | Path) -> VerificationOutcome:
        """Verify that ``environment`` serves the indexes declared in ``indexes_path``.

        1. Resolve the environment to a project ID
        2. Load and expand the expected definitions
        3. Fetch observed state (bounded by the fetch timeout)
        4. Reconcile
        """
        project_id = resolve_environment(environment, self.firebaserc_path)
        logger.info("Verifying indexes for project %s (environment: %s)", project_id, environment)

        expected = load_specification(indexes_path)
        if not expected:
            logger.warning("No index definitions found in %s", indexes_path)

        observed = await fetch_with_timeout(self.fetcher, project_id, self.fetch_timeout)
        result = reconcile(expected, observed)

        return VerificationOutcome(
            environment=environment,
            project_id=project_id,
            expected=expected,
            result=result,
        )
