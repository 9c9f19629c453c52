"""Container generation.

Generating the container itself (native project templates, toolchains) is
the job of an external generator command. This module prepares what the
generator needs and runs it.
"""

from __future__ import annotations

import json
import shlex
from pathlib import Path
from typing import Protocol

from ern.core.result import Err, Ok, Result
from ern.platform.files import atomic_write_text
from ern.platform.process import run as run_process
from ern.services.cauldron.descriptor import NativeApplicationDescriptor
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.store import VersionStore

REQUEST_FILE = "ern-container.json"


class ContainerGenerator(Protocol):
    def generate(
        self,
        *,
        descriptor: NativeApplicationDescriptor,
        store: VersionStore,
        out_dir: Path,
        composite_dir: Path,
    ) -> Result[None, CauldronError]: ...


def generation_request(
    store: VersionStore, descriptor: NativeApplicationDescriptor
) -> Result[dict[str, object], CauldronError]:
    """What goes into the container of ``descriptor``, as the generator reads it."""
    node = store.get_version_node(descriptor)
    if isinstance(node, Err):
        return node
    return Ok(
        {
            "descriptor": str(descriptor),
            "platform": descriptor.platform,
            "nativeDependencies": list(node.value.native_deps),
            "miniApps": list(node.value.miniapps),
            "jsApiImpls": list(node.value.js_api_impls),
        }
    )


class CommandContainerGenerator:
    """Runs ``<command> <descriptor> <out_dir> <composite_dir>``.

    The generation request is written to ``<composite_dir>/ern-container.json``
    first. The generator is expected to leave the container in ``out_dir``
    and the composite JS project (with its ``yarn.lock``) in ``composite_dir``.
    """

    def __init__(self, command: str, *, timeout: float | None = None) -> None:
        self._argv = shlex.split(command)
        self._timeout = timeout

    def generate(
        self,
        *,
        descriptor: NativeApplicationDescriptor,
        store: VersionStore,
        out_dir: Path,
        composite_dir: Path,
    ) -> Result[None, CauldronError]:
        request = generation_request(store, descriptor)
        if isinstance(request, Err):
            return request

        try:
            atomic_write_text(
                composite_dir / REQUEST_FILE, json.dumps(request.value, indent=2) + "\n"
            )
        except OSError as e:
            return Err(
                CauldronError(
                    kind="operation",
                    message=f"failed to prepare container generation for {descriptor}",
                    hint=str(e),
                )
            )

        cmd = [*self._argv, str(descriptor), str(out_dir), str(composite_dir)]
        result = run_process(cmd, cwd=composite_dir, timeout=self._timeout)
        if isinstance(result, Err):
            return Err(
                CauldronError(
                    kind="operation",
                    message=f"container generation failed for {descriptor}",
                    hint=result.error.stderr.strip() or str(result.error),
                )
            )
        return Ok(None)
