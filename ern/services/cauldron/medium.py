"""Durable media the cauldron is persisted through.

The transaction manager only needs two operations from a medium:
``read_snapshot()`` and ``write_snapshot(data, tags)``. A failed write must
leave the previously persisted snapshot in place.
"""

from __future__ import annotations

import contextlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from ern.core.result import Err, Ok, Result
from ern.platform.files import atomic_write_text
from ern.platform.process import run as run_process
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.model import CauldronData, snapshot_from_dict, snapshot_to_dict

CAULDRON_FILE = "cauldron.json"
LOG_FILE = "cauldron.log"
DEFAULT_TAG = "update cauldron"
GIT_TIMEOUT_SECONDS = 30.0


class DurableMedium(Protocol):
    def read_snapshot(self) -> Result[CauldronData, CauldronError]: ...

    def write_snapshot(
        self, data: CauldronData, tags: tuple[str, ...]
    ) -> Result[None, CauldronError]: ...


def _empty_history() -> list[tuple[str, ...]]:
    return []


@dataclass
class InMemoryMedium:
    """Medium that keeps the snapshot in memory (tests, dry runs)."""

    snapshot: CauldronData = field(default_factory=CauldronData)
    history: list[tuple[str, ...]] = field(default_factory=_empty_history)

    def read_snapshot(self) -> Result[CauldronData, CauldronError]:
        return Ok(self.snapshot)

    def write_snapshot(
        self, data: CauldronData, tags: tuple[str, ...]
    ) -> Result[None, CauldronError]:
        self.snapshot = data
        self.history.append(tags)
        return Ok(None)


def encode_snapshot(data: CauldronData) -> str:
    return json.dumps(snapshot_to_dict(data), indent=2) + "\n"


class FileMedium:
    """Medium backed by a single ``cauldron.json`` file, written atomically.

    Every successful write appends its tags to ``cauldron.log``.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    @property
    def path(self) -> Path:
        return self._root / CAULDRON_FILE

    @property
    def log_path(self) -> Path:
        return self._root / LOG_FILE

    def read_snapshot(self) -> Result[CauldronData, CauldronError]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Ok(CauldronData())
        except OSError as e:
            return Err(
                CauldronError(
                    kind="invalid_input",
                    message=f"failed to read cauldron: {self.path}",
                    hint=str(e),
                )
            )

        try:
            obj: object = json.loads(raw)
        except json.JSONDecodeError as e:
            return Err(
                CauldronError(
                    kind="invalid_input",
                    message=f"cauldron is not valid JSON: {self.path}",
                    hint=str(e),
                )
            )
        return snapshot_from_dict(obj)

    def write_snapshot(
        self, data: CauldronData, tags: tuple[str, ...]
    ) -> Result[None, CauldronError]:
        previous = self._read_previous()
        if isinstance(previous, Err):
            return previous

        written = self._write_text(encode_snapshot(data))
        if isinstance(written, Err):
            return written

        entry = "".join(f"{tag}\n" for tag in tags or (DEFAULT_TAG,))
        log_size = self.log_path.stat().st_size if self.log_path.is_file() else 0
        try:
            self._append_log(entry)
        except OSError as e:
            self._truncate_log(log_size)
            self._restore(previous.value)
            return Err(
                CauldronError(
                    kind="persist",
                    message=f"failed to append to cauldron log: {self.log_path}",
                    hint=str(e),
                )
            )
        return Ok(None)

    def _append_log(self, entry: str) -> None:
        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(entry)

    def _truncate_log(self, size: int) -> None:
        if not self.log_path.is_file():
            return
        with contextlib.suppress(OSError), self.log_path.open("r+b") as f:
            f.truncate(size)

    def _read_previous(self) -> Result[str | None, CauldronError]:
        try:
            return Ok(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Ok(None)
        except OSError as e:
            return Err(
                CauldronError(
                    kind="persist",
                    message=f"failed to read cauldron before writing: {self.path}",
                    hint=str(e),
                )
            )

    def _write_text(self, content: str) -> Result[None, CauldronError]:
        try:
            atomic_write_text(self.path, content)
        except OSError as e:
            return Err(
                CauldronError(
                    kind="persist",
                    message=f"failed to write cauldron: {self.path}",
                    hint=str(e),
                )
            )
        return Ok(None)

    def _restore(self, previous: str | None) -> None:
        if previous is None:
            self.path.unlink(missing_ok=True)
        else:
            self._write_text(previous)


class GitMedium(FileMedium):
    """File medium whose every write is a git commit tagged with the messages.

    If the commit fails, the previous file content is restored so the
    repository stays at its last committed snapshot.
    """

    def _git(self, *args: str) -> Result[str, CauldronError]:
        result = run_process(["git", *args], cwd=self.root, timeout=GIT_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            return Err(
                CauldronError(
                    kind="persist",
                    message=f"git {args[0]} failed in {self.root}",
                    hint=e.stderr.strip() or None,
                )
            )
        return Ok(result.value)

    def ensure_repository(self) -> Result[None, CauldronError]:
        if (self.root / ".git").is_dir():
            return Ok(None)
        self.root.mkdir(parents=True, exist_ok=True)
        init = self._git("init", "-q")
        if isinstance(init, Err):
            return init
        return Ok(None)

    def write_snapshot(
        self, data: CauldronData, tags: tuple[str, ...]
    ) -> Result[None, CauldronError]:
        repo = self.ensure_repository()
        if isinstance(repo, Err):
            return repo

        previous = self._read_previous()
        if isinstance(previous, Err):
            return previous

        written = self._write_text(encode_snapshot(data))
        if isinstance(written, Err):
            return written

        message_args: list[str] = []
        for tag in tags or (DEFAULT_TAG,):
            message_args.extend(["-m", tag])

        for args in (("add", "--", CAULDRON_FILE), ("commit", "-q", *message_args)):
            step = self._git(*args)
            if isinstance(step, Err):
                self._git("reset", "-q", "--", CAULDRON_FILE)
                self._restore(previous.value)
                return step
        return Ok(None)
