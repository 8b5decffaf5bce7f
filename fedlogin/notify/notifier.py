# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Session notifiers hand login outcomes to the presentation layer.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from ..core.types import LoginResult

logger = logging.getLogger(__name__)


class SessionNotifier(ABC):
    """Receives exactly one terminal result per login attempt."""

    @abstractmethod
    async def notify(self, result: LoginResult) -> None:
        """Deliver a terminal login result."""
        pass

    async def loading_changed(self, is_loading: bool) -> None:
        """An attempt entered or left the pending state."""
        pass


async def _call(func: Callable[..., Any], *args: Any) -> None:
    outcome = func(*args)
    if asyncio.iscoroutine(outcome):
        await outcome


class CallbackNotifier(SessionNotifier):
    """Forwards results to plain or async callables."""

    def __init__(self, on_result: Callable[[LoginResult], Any],
                 on_loading: Optional[Callable[[bool], Any]] = None):
        self.on_result = on_result
        self.on_loading = on_loading

    async def notify(self, result: LoginResult) -> None:
        await _call(self.on_result, result)

    async def loading_changed(self, is_loading: bool) -> None:
        if self.on_loading is not None:
            await _call(self.on_loading, is_loading)


class MemoryNotifier(SessionNotifier):
    """Records every result and loading signal; used by tests and demos."""

    def __init__(self):
        self.results: List[LoginResult] = []
        self.loading_states: List[bool] = []

    async def notify(self, result: LoginResult) -> None:
        self.results.append(result)

    async def loading_changed(self, is_loading: bool) -> None:
        self.loading_states.append(is_loading)

    @property
    def last(self) -> Optional[LoginResult]:
        return self.results[-1] if self.results else None

    @property
    def is_loading(self) -> bool:
        return bool(self.loading_states) and self.loading_states[-1]

    def results_for(self, attempt_id: str) -> List[LoginResult]:
        """Results delivered for one attempt."""
        return [result for result in self.results if result.attempt_id == attempt_id]


class LoggingNotifier(SessionNotifier):
    """Logs outcomes; the default when no notifier is supplied."""

    async def notify(self, result: LoginResult) -> None:
        method = getattr(result.method, 'value', result.method)
        if result.ok:
            logger.info(f"Signed in with {method}: {result.session.subject_id}")
        else:
            logger.info(f"Sign-in with {method} failed: {result.message}")
