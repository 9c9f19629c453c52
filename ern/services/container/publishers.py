"""Container publishers: push a generated container to a publication target.

Every publisher shells out (git, mvn, jfrog) through ``run_process``.
Publication is not transactional: a target that accepted a push keeps it,
even if the cauldron update is rolled back afterwards.
"""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ern.core.result import Err, Ok, Result
from ern.platform.files import atomic_write_text
from ern.platform.process import run as run_process
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.model import Credentials, PublisherKind, PublisherSpec

PUBLISH_TIMEOUT_SECONDS = 600.0
MAVEN_REPOSITORY_ID = "ern-container"


@dataclass(frozen=True, slots=True)
class PublishRequest:
    container_path: Path
    container_version: str
    url: str
    credentials: Credentials | None
    artifact_id: str
    group_id: str


class Publisher(Protocol):
    @property
    def kind(self) -> PublisherKind: ...

    def publish(self, request: PublishRequest) -> Result[None, CauldronError]: ...


def _failed(kind: str, request: PublishRequest, detail: str) -> Err[CauldronError]:
    return Err(
        CauldronError(
            kind="operation",
            message=f"{kind} publication of container {request.container_version} "
            f"to {request.url} failed",
            hint=detail or None,
        )
    )


def _step(
    kind: str, request: PublishRequest, cmd: list[str], cwd: Path
) -> Result[str, CauldronError]:
    result = run_process(cmd, cwd=cwd, timeout=PUBLISH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return _failed(kind, request, result.error.stderr.strip() or str(result.error))
    return Ok(result.value)


def _find_artifact(container_path: Path, pattern: str) -> Path | None:
    found = sorted(container_path.rglob(pattern))
    return found[0] if found else None


class GitHubPublisher:
    """Commit the container into a git repository and tag it ``v<version>``."""

    kind: PublisherKind = "github"

    def publish(self, request: PublishRequest) -> Result[None, CauldronError]:
        with tempfile.TemporaryDirectory(prefix="ern-publish-") as tmp:
            work = Path(tmp)
            clone = _step(self.kind, request, ["git", "clone", "-q", request.url, "repo"], work)
            if isinstance(clone, Err):
                return clone

            repo = work / "repo"
            try:
                shutil.copytree(
                    request.container_path,
                    repo,
                    dirs_exist_ok=True,
                    ignore=shutil.ignore_patterns(".git"),
                )
            except OSError as e:
                return _failed(self.kind, request, str(e))

            tag = f"v{request.container_version}"
            for cmd in (
                ["git", "add", "-A"],
                ["git", "commit", "-q", "--allow-empty", "-m", f"Container {tag}"],
                ["git", "tag", tag],
                ["git", "push", "-q", "origin", "HEAD"],
                ["git", "push", "-q", "origin", tag],
            ):
                step = _step(self.kind, request, cmd, repo)
                if isinstance(step, Err):
                    return step
        return Ok(None)


def _maven_settings(credentials: Credentials) -> str:
    return (
        "<settings><servers><server>"
        f"<id>{MAVEN_REPOSITORY_ID}</id>"
        f"<username>{credentials.user}</username>"
        f"<password>{credentials.password}</password>"
        "</server></servers></settings>\n"
    )


class MavenPublisher:
    """Deploy the container AAR with ``mvn deploy:deploy-file``."""

    kind: PublisherKind = "maven"

    def publish(self, request: PublishRequest) -> Result[None, CauldronError]:
        artifact = _find_artifact(request.container_path, "*.aar")
        if artifact is None:
            return _failed(self.kind, request, f"no .aar found in {request.container_path}")

        with tempfile.TemporaryDirectory(prefix="ern-maven-") as tmp:
            cmd = [
                "mvn",
                "-B",
                "deploy:deploy-file",
                f"-Dfile={artifact}",
                f"-DgroupId={request.group_id}",
                f"-DartifactId={request.artifact_id}",
                f"-Dversion={request.container_version}",
                "-Dpackaging=aar",
                f"-Durl={request.url}",
                f"-DrepositoryId={MAVEN_REPOSITORY_ID}",
            ]
            if request.credentials is not None:
                settings = Path(tmp) / "settings.xml"
                try:
                    atomic_write_text(settings, _maven_settings(request.credentials))
                except OSError as e:
                    return _failed(self.kind, request, str(e))
                cmd[2:2] = ["-s", str(settings)]

            deployed = _step(self.kind, request, cmd, request.container_path)
            if isinstance(deployed, Err):
                return deployed
        return Ok(None)


class JCenterPublisher:
    """Upload the container AAR with the JFrog CLI.

    The publisher url is ``<artifactory url>/<repository>``.
    """

    kind: PublisherKind = "jcenter"

    def publish(self, request: PublishRequest) -> Result[None, CauldronError]:
        artifact = _find_artifact(request.container_path, "*.aar")
        if artifact is None:
            return _failed(self.kind, request, f"no .aar found in {request.container_path}")

        server, _, repository = request.url.rstrip("/").rpartition("/")
        if not server or not repository:
            return _failed(self.kind, request, "expected url of the form <server>/<repository>")

        group_path = request.group_id.replace(".", "/")
        version = request.container_version
        target = (
            f"{repository}/{group_path}/{request.artifact_id}/{version}/"
            f"{request.artifact_id}-{version}.aar"
        )
        cmd = ["jfrog", "rt", "upload", str(artifact), target, f"--url={server}"]
        if request.credentials is not None:
            cmd += [
                f"--user={request.credentials.user}",
                f"--password={request.credentials.password}",
            ]
        uploaded = _step(self.kind, request, cmd, request.container_path)
        if isinstance(uploaded, Err):
            return uploaded
        return Ok(None)


def publisher_for(spec: PublisherSpec) -> Publisher:
    match spec.kind:
        case "github":
            return GitHubPublisher()
        case "maven":
            return MavenPublisher()
        case "jcenter":
            return JCenterPublisher()
