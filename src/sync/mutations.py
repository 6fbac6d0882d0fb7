"""Optimistic mutation pipeline.

Local state is changed before the backend write is issued. A failed write
restores exactly the captured pre-mutation values of the touched fields,
guarded by field versions so a later mutation's value is never clobbered.
Writes are never retried.
"""

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any
from uuid import UUID

import structlog

from core.exceptions import AppException
from sync.entity_store import EntityCollection, T, VersionTokens
from sync.notifier import Notifier

logger = structlog.get_logger()

Write = Callable[[], Awaitable[Any]]


class OptimisticMutationPipeline:
    """Runs apply, write, then keep or roll back."""

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier

    async def run(
        self,
        collection: EntityCollection[T],
        ids: Iterable[UUID],
        values: Mapping[str, Any],
        write: Write,
        failure_message: str,
        success_message: str | None = None,
    ) -> bool:
        """Apply ``values`` to every known id in ``ids`` and issue ``write``.

        Ids the collection does not hold are left to the backend; the write is
        still issued for them.

        Returns:
            True if the write succeeded, False if it failed and was rolled back
        """
        captured: dict[UUID, tuple[dict[str, Any], VersionTokens]] = {}
        for item_id in dict.fromkeys(ids):
            item = collection.get(item_id)
            if item is None:
                continue
            previous = {name: getattr(item, name) for name in values}
            captured[item_id] = (previous, collection.patch(item_id, values))

        try:
            await write()
        except AppException as exc:
            restored = 0
            for item_id, (previous, tokens) in captured.items():
                if collection.restore(item_id, previous, tokens):
                    restored += 1
            logger.warning(
                "optimistic_mutation_rolled_back",
                error_code=exc.error_code.value,
                fields=sorted(values),
                targets=len(captured),
                restored=restored,
            )
            self._notifier.error(failure_message)
            return False

        if success_message:
            self._notifier.success(success_message)
        return True
