"""
Mock adapters — test doubles for shell steps and the cache store.

Used in mock mode and in tests to run the pipeline without npm,
Cypress or a cache directory. Both record what they were asked to do.
"""

from __future__ import annotations

from e2e_action.adapters.base import Adapter, ExecutionContext
from e2e_action.adapters.cache.base import CacheBackend
from e2e_action.core.models.action import Receipt
from e2e_action.core.models.cache import CacheResult, CacheSpec


class MockAdapter(Adapter):
    """Universal mock step adapter.

    By default, returns success for everything. Can be configured
    with custom responses per action ID.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        """Number of times execute has been called."""
        return len(self._call_log)

    @property
    def commands(self) -> list[str]:
        """The ``command`` param of every executed action, in order."""
        return [ctx.action.params.get("command", "") for ctx in self._call_log]

    @property
    def action_ids(self) -> list[str]:
        return [ctx.action.id for ctx in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        """Set a custom response for a specific action ID."""
        self._responses[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        """Configure a specific action to fail."""
        self._responses[action_id] = Receipt.failure(
            adapter=self._name,
            action_id=action_id,
            error=error,
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        if context.action.id in self._responses:
            return self._responses[context.action.id]

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()


class MockCacheBackend(CacheBackend):
    """In-memory cache store.

    Keys passed as ``entries`` (or saved later) count as present.
    Nothing is read from or written to disk.
    """

    def __init__(self, entries: set[str] | None = None):
        self._entries: set[str] = set(entries or ())
        self.restored: list[str] = []
        self.saved: list[str] = []

    @property
    def name(self) -> str:
        return "mock"

    def restore(self, spec: CacheSpec) -> CacheResult:
        self.restored.append(spec.primary_key)
        if spec.primary_key in self._entries:
            return CacheResult(name=spec.name, hit=True, matched_key=spec.primary_key)
        partial = sorted(k for k in self._entries if k.startswith(spec.restore_keys))
        if partial:
            return CacheResult(name=spec.name, hit=False, matched_key=partial[-1])
        return CacheResult(name=spec.name)

    def save(self, spec: CacheSpec) -> bool:
        if spec.primary_key in self._entries:
            return False
        self._entries.add(spec.primary_key)
        self.saved.append(spec.primary_key)
        return True
