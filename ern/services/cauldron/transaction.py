"""Transactions over the cauldron.

A transaction is a single working copy of the durable snapshot. All writes go
to the working copy; ``commit`` persists it through the durable medium,
``discard`` drops it. External side effects performed while a transaction is
open (container publication) are not rolled back by ``discard``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from ern.core.result import Err, Ok, Result
from ern.output.console import ConsoleProtocol, Style
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.medium import DurableMedium
from ern.services.cauldron.store import VersionStore


def _tags(message: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(message, str):
        return (message,)
    return tuple(message)


class TransactionManager:
    def __init__(
        self, store: VersionStore, medium: DurableMedium, console: ConsoleProtocol
    ) -> None:
        self._store = store
        self._medium = medium
        self._console = console

    @classmethod
    def open(
        cls, medium: DurableMedium, console: ConsoleProtocol
    ) -> Result[TransactionManager, CauldronError]:
        """Load the durable snapshot from ``medium`` and wrap it in a store."""
        snapshot = medium.read_snapshot()
        if isinstance(snapshot, Err):
            return snapshot
        return Ok(cls(VersionStore(snapshot.value), medium, console))

    @property
    def store(self) -> VersionStore:
        return self._store

    @property
    def active(self) -> bool:
        return self._store.in_transaction

    def begin(self) -> Result[None, CauldronError]:
        opened = self._store.open_working_copy()
        if isinstance(opened, Err):
            return opened
        self._console.print("cauldron: transaction started", Style.DIM)
        return Ok(None)

    def run[T, E](
        self, body: Callable[[VersionStore], Result[T, E]]
    ) -> Result[T, E | CauldronError]:
        """Run ``body`` against the working copy.

        An ``Err`` result discards the working copy. An exception discards it
        too and is then re-raised.
        """
        if not self.active:
            return Err(
                CauldronError(
                    kind="not_in_transaction",
                    message="no cauldron transaction is active",
                    hint="call begin() first",
                )
            )
        try:
            result = body(self._store)
        except Exception:
            self.discard()
            raise
        if isinstance(result, Err):
            self.discard()
        return result

    def commit(self, message: str | Sequence[str]) -> Result[None, CauldronError]:
        working = self._store.working_copy
        if working is None:
            return Err(
                CauldronError(
                    kind="not_in_transaction",
                    message="no cauldron transaction to commit",
                )
            )

        tags = _tags(message)
        written = self._medium.write_snapshot(working, tags)
        if isinstance(written, Err):
            self.discard()
            return written

        self._store.promote_working_copy()
        self._console.print(f"cauldron: committed ({'; '.join(tags)})", Style.DIM)
        return Ok(None)

    def discard(self) -> None:
        if not self.active:
            return
        self._store.drop_working_copy()
        self._console.print("cauldron: changes discarded", Style.DIM)

    def perform_state_update[T, E](
        self,
        body: Callable[[VersionStore], Result[T, E]],
        message: str | Sequence[str],
    ) -> Result[T, E | CauldronError]:
        """Begin, run ``body``, commit. Any failure leaves the durable snapshot untouched."""
        begun = self.begin()
        if isinstance(begun, Err):
            return begun

        result = self.run(body)
        if isinstance(result, Err):
            return result

        committed = self.commit(message)
        if isinstance(committed, Err):
            return committed
        return result
