"""Counter Store — client-side state machine for one counter (data, loading, updating, error).

Invariants:
    - load(): is_loading while fetching; failure clears data and sets error
    - initialize()/increment(): is_updating while in flight; failure keeps previous data
    - clear_error() resets error only
    - Subscribers are notified after every state change

Design Decisions:
    - No retry, no debouncing, no optimistic update — state only reflects server answers
    - initialize() re-fetches the new account so data always carries a real count;
      the selected address only switches once that fetch succeeds
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

from counter_gateway.client.api import ApiClientError, CounterApiClient, CounterData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterState:
    data: CounterData | None = None
    is_loading: bool = True
    is_updating: bool = False
    error: str | None = None


class CounterStore:
    def __init__(self, api: CounterApiClient, counter_address: str | None = None):
        self.api = api
        self.counter_address = counter_address
        self.state = CounterState()
        self._subscribers: list[Callable[[CounterState], None]] = []

    def subscribe(self, callback: Callable[[CounterState], None]) -> Callable[[], None]:
        """Register a listener; returns an unsubscribe function."""
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    async def load(self) -> None:
        self._set(replace(self.state, is_loading=True, error=None))
        if self.counter_address is None:
            self._set(CounterState(is_loading=False))
            return
        try:
            data = await self.api.fetch_counter(self.counter_address)
        except ApiClientError as e:
            self._set(CounterState(is_loading=False, error=e.message))
            return
        self._set(CounterState(data=data, is_loading=False))

    async def initialize(self, seed: str = "counter") -> None:
        async def action() -> CounterData:
            created = await self.api.initialize_counter(seed)
            data = await self.api.fetch_counter(created.counter_address)
            self.counter_address = created.counter_address
            return replace(data, signature=created.signature)

        await self._run_action(action)

    async def increment(self) -> None:
        async def action() -> CounterData:
            if self.counter_address is None:
                raise ApiClientError("No counter selected")
            data = await self.api.increment_counter(self.counter_address)
            previous = self.state.data
            if previous is not None and data.authority is None:
                data = replace(data, authority=previous.authority)
            return data

        await self._run_action(action)

    def clear_error(self) -> None:
        self._set(replace(self.state, error=None))

    async def _run_action(self, action) -> None:
        self._set(replace(self.state, is_updating=True, error=None))
        try:
            data = await action()
        except ApiClientError as e:
            logger.warning(f"Counter action failed: {e.message}")
            self._set(replace(self.state, is_updating=False, error=e.message))
            return
        self._set(CounterState(data=data, is_loading=False, is_updating=False))

    def _set(self, state: CounterState) -> None:
        self.state = state
        for callback in list(self._subscribers):
            callback(state)
