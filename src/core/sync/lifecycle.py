"""
Entry points a deployment tool calls.

The core has no notion of hooks. Whatever hosts it (the HTTP API, the
CLI script, a CI job) maps its own events onto these plain callables:

- deploy finished      -> on_deploy_complete()
- about to tear down   -> on_before_remove()
- operator asked       -> sync_command(before=..., after=...)
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from .models import RunReport
from .orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

BeforeCallback = Callable[[], Union[None, Awaitable[None]]]
AfterCallback = Callable[[RunReport], Union[None, Awaitable[None]]]


async def _notify(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class SyncLifecycle:
    """
    Binds an orchestrator to the raw target configuration.

    Built once per invocation with the storage client for that
    invocation; nothing is shared between invocations.
    """

    def __init__(self, orchestrator: SyncOrchestrator, raw_targets: Any) -> None:
        self._orchestrator = orchestrator
        self._raw_targets = raw_targets

    async def sync(self) -> RunReport:
        logger.info("sync starting...")
        try:
            report = await self._orchestrator.run_sync(self._raw_targets)
        except Exception as e:
            logger.error("sync error: %s", e)
            raise
        logger.info("sync end")
        return report

    async def empty(self) -> RunReport:
        logger.info("remove starting...")
        try:
            report = await self._orchestrator.run_empty(self._raw_targets)
        except Exception as e:
            logger.error("remove error: %s", e)
            raise
        logger.info("remove end")
        return report

    async def on_deploy_complete(self) -> RunReport:
        return await self.sync()

    async def on_before_remove(self) -> RunReport:
        return await self.empty()

    async def sync_command(
        self,
        before: Optional[BeforeCallback] = None,
        after: Optional[AfterCallback] = None,
    ) -> RunReport:
        """
        Manual sync with notifications.

        `before` runs before anything is touched; `after` receives the
        report of a successful run. Callbacks may be plain functions or
        coroutines. On failure `after` is skipped and the error propagates.
        """
        await _notify(before)
        report = await self.sync()
        await _notify(after, report)
        return report
