"""Container publication: generate, publish, then record the result.

The orchestrator runs inside a cauldron transaction. It only writes to the
working copy after every publisher succeeded, and the caller commits or
discards. Publication targets cannot be rolled back; when a later step fails
after some targets accepted the container, the error says so.
"""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from ern.core.config import ContainerConfig
from ern.core.result import Err, Ok, Result
from ern.output.console import ConsoleProtocol, Style
from ern.services.cauldron.descriptor import NativeApplicationDescriptor
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.model import PublisherSpec
from ern.services.cauldron.semver import bump_patch
from ern.services.cauldron.store import VersionStore
from ern.services.cauldron.transaction import TransactionManager
from ern.services.container.generator import ContainerGenerator
from ern.services.container.publishers import Publisher, PublishRequest, publisher_for

CONTAINER_YARN_KEY = "container"
DEFAULT_CONTAINER_VERSION = "1.0.0"
ARTIFACT_SUFFIX = "-ern-container"
LOCK_FILE_NAME = "yarn.lock"


def artifact_id(descriptor: NativeApplicationDescriptor) -> str:
    return f"{descriptor.name}{ARTIFACT_SUFFIX}"


def compute_next_container_version(
    store: VersionStore,
    descriptor: NativeApplicationDescriptor,
    override: str | None = None,
) -> Result[str, CauldronError]:
    """Explicit override, else patch bump of the current version, else 1.0.0."""
    if override:
        return Ok(override)
    current = store.get_top_level_container_version(descriptor)
    if isinstance(current, Err):
        return current
    if current.value is None:
        return Ok(DEFAULT_CONTAINER_VERSION)
    bumped = bump_patch(current.value)
    if bumped is None:
        return Err(
            CauldronError(
                kind="invalid_input",
                message=f"cannot derive a new container version from {current.value!r}",
                hint="pass an explicit container version",
            )
        )
    return Ok(bumped)


@dataclass(frozen=True, slots=True)
class PublicationOutcome:
    container_version: str
    published: tuple[str, ...]
    lock_file_reference: str | None


def _partial_publish(error: CauldronError, published: Sequence[str]) -> CauldronError:
    if not published:
        return error
    note = (
        "the cauldron was rolled back, but these publication targets may be "
        f"partially updated: {', '.join(published)}"
    )
    hint = f"{error.hint}; {note}" if error.hint else note
    return replace(error, hint=hint)


class ContainerPublicationOrchestrator:
    def __init__(
        self,
        *,
        generator: ContainerGenerator,
        config: ContainerConfig,
        console: ConsoleProtocol,
        publisher_factory: Callable[[PublisherSpec], Publisher] = publisher_for,
    ) -> None:
        self._generator = generator
        self._config = config
        self._console = console
        self._publisher_factory = publisher_factory

    def run(
        self,
        store: VersionStore,
        descriptor: NativeApplicationDescriptor,
        container_version: str,
    ) -> Result[PublicationOutcome, CauldronError]:
        if descriptor.platform is None:
            return Err(
                CauldronError(
                    kind="invalid_input",
                    message=f"{descriptor} does not specify a platform",
                )
            )

        generator_config = store.get_container_generator_config(descriptor)
        if isinstance(generator_config, Err):
            return generator_config
        publishers = generator_config.value.publishers if generator_config.value else ()

        out_dir = self._config.out_dir(descriptor.platform)
        composite_dir = Path(tempfile.mkdtemp(prefix="ern-composite-"))
        try:
            return self._run(
                store, descriptor, container_version, publishers, out_dir, composite_dir
            )
        finally:
            shutil.rmtree(composite_dir, ignore_errors=True)

    def _run(
        self,
        store: VersionStore,
        descriptor: NativeApplicationDescriptor,
        container_version: str,
        publishers: Sequence[PublisherSpec],
        out_dir: Path,
        composite_dir: Path,
    ) -> Result[PublicationOutcome, CauldronError]:
        try:
            if out_dir.exists():
                shutil.rmtree(out_dir)
            out_dir.mkdir(parents=True)
        except OSError as e:
            return Err(
                CauldronError(
                    kind="operation",
                    message=f"cannot prepare container output directory {out_dir}",
                    hint=str(e),
                )
            )

        self._console.print(
            f"Generating container {container_version} for {descriptor}", Style.DIM
        )
        generated = self._generator.generate(
            descriptor=descriptor,
            store=store,
            out_dir=out_dir,
            composite_dir=composite_dir,
        )
        if isinstance(generated, Err):
            return generated

        published: list[str] = []
        for spec in publishers:
            self._console.print(f"Publishing container to {spec.kind} ({spec.url})", Style.DIM)
            publisher = self._publisher_factory(spec)
            result = publisher.publish(
                PublishRequest(
                    container_path=out_dir,
                    container_version=container_version,
                    url=spec.url,
                    credentials=spec.credentials,
                    artifact_id=artifact_id(descriptor),
                    group_id=self._config.maven_group_id,
                )
            )
            if isinstance(result, Err):
                return Err(_partial_publish(result.error, published))
            published.append(f"{spec.kind} {spec.url}")

        reference: str | None = None
        lock_file = composite_dir / LOCK_FILE_NAME
        if lock_file.is_file():
            try:
                content = lock_file.read_text(encoding="utf-8")
            except OSError as e:
                return Err(
                    _partial_publish(
                        CauldronError(
                            kind="operation",
                            message=f"cannot read {lock_file}",
                            hint=str(e),
                        ),
                        published,
                    )
                )
            stored = store.add_or_update_lock_file(descriptor, CONTAINER_YARN_KEY, content)
            if isinstance(stored, Err):
                return Err(_partial_publish(stored.error, published))
            reference = stored.value

        updated = store.update_container_version(descriptor, container_version)
        if isinstance(updated, Err):
            return Err(_partial_publish(updated.error, published))

        self._console.success(f"Published container {container_version} for {descriptor}")
        return Ok(
            PublicationOutcome(
                container_version=container_version,
                published=tuple(published),
                lock_file_reference=reference,
            )
        )


def perform_container_state_update[T](
    tm: TransactionManager,
    orchestrator: ContainerPublicationOrchestrator,
    body: Callable[[VersionStore], Result[T, CauldronError]],
    *,
    descriptor: NativeApplicationDescriptor,
    message: str | Sequence[str],
    container_version: str | None = None,
) -> Result[PublicationOutcome, CauldronError]:
    """Apply ``body`` and publish a new container, all in one transaction.

    The container version is decided before the transaction begins. Nothing
    is committed unless ``body``, generation and every publisher succeed.
    """
    if descriptor.platform is None:
        return Err(
            CauldronError(
                kind="invalid_input",
                message=f"{descriptor} does not specify a platform",
            )
        )

    version = compute_next_container_version(tm.store, descriptor, container_version)
    if isinstance(version, Err):
        return version
    next_version = version.value

    outcomes: list[PublicationOutcome] = []

    def update(store: VersionStore) -> Result[PublicationOutcome, CauldronError]:
        applied = body(store)
        if isinstance(applied, Err):
            return applied
        published = orchestrator.run(store, descriptor, next_version)
        if isinstance(published, Ok):
            outcomes.append(published.value)
        return published

    result = tm.perform_state_update(update, message)
    if isinstance(result, Err) and outcomes:
        # Publishers already accepted the container; only the commit failed.
        return Err(_partial_publish(result.error, outcomes[-1].published))
    return result
