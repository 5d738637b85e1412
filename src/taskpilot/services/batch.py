"""Batch operations over many tasks of one provider."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..errors import ProviderNotInitializedError
from ..models import BatchResult, Task
from ..providers.protocol import TaskProvider
from ..utils.rate_limiter import ConcurrencyLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BatchService:
    """Apply one operation to a list of task ids.

    Each id is attempted independently: a failure is recorded in
    ``BatchResult.failed`` and the remaining ids still run. An uninitialized
    provider is a usage error and aborts the whole batch. In parallel mode
    ``limit`` narrows concurrency below the providers' shared gate.
    """

    def __init__(
        self,
        provider: TaskProvider,
        parallel: bool = False,
        limit: int | None = None,
    ) -> None:
        self.provider = provider
        self.parallel = parallel
        self.limit = limit

    async def _run(
        self,
        name: str,
        task_ids: list[str],
        op: Callable[[str], Awaitable[T]],
    ) -> BatchResult[T]:
        result: BatchResult[T] = BatchResult()
        if not task_ids:
            return result

        async def attempt(task_id: str) -> tuple[str, T | None, Exception | None]:
            try:
                return task_id, await op(task_id), None
            except ProviderNotInitializedError:
                raise
            except Exception as e:
                logger.warning("%s failed for %s: %s", name, task_id, e)
                return task_id, None, e

        if self.parallel:
            limiter = ConcurrencyLimiter(self.limit) if self.limit else None

            async def gated(task_id: str):
                if limiter is None:
                    return await attempt(task_id)
                return await limiter.run(attempt, task_id)

            outcomes = await asyncio.gather(*(gated(task_id) for task_id in task_ids))
        else:
            outcomes = [await attempt(task_id) for task_id in task_ids]

        for task_id, value, error in outcomes:
            if error is not None:
                result.failed.append((task_id, error))
            else:
                result.success.append(value)  # type: ignore[arg-type]

        logger.info(
            "%s: %d succeeded, %d failed", name, len(result.success), len(result.failed)
        )
        return result

    async def batch_move(self, task_ids: list[str], column_id: str) -> BatchResult[Task]:
        return await self._run(
            "batch_move", task_ids, lambda task_id: self.provider.move_task(task_id, column_id)
        )

    async def batch_archive(self, task_ids: list[str], archive: bool = True) -> BatchResult[Task]:
        op = self.provider.archive_task if archive else self.provider.unarchive_task
        name = "batch_archive" if archive else "batch_unarchive"
        return await self._run(name, task_ids, op)

    async def batch_add_label(self, task_ids: list[str], label_id: str) -> BatchResult[str]:
        """Add ``label_id`` to each task. Successes are reported as task ids."""

        async def op(task_id: str) -> str:
            await self.provider.add_label(task_id, label_id)
            return task_id

        return await self._run("batch_add_label", task_ids, op)

    async def batch_add_member(self, task_ids: list[str], member_id: str) -> BatchResult[str]:
        """Assign ``member_id`` to each task. Successes are reported as task ids."""

        async def op(task_id: str) -> str:
            await self.provider.add_member(task_id, member_id)
            return task_id

        return await self._run("batch_add_member", task_ids, op)
