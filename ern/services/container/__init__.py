"""Container generation and publication."""

from __future__ import annotations

from ern.services.container.generator import CommandContainerGenerator, ContainerGenerator
from ern.services.container.orchestrator import (
    CONTAINER_YARN_KEY,
    DEFAULT_CONTAINER_VERSION,
    ContainerPublicationOrchestrator,
    PublicationOutcome,
    artifact_id,
    compute_next_container_version,
    perform_container_state_update,
)
from ern.services.container.publishers import (
    GitHubPublisher,
    JCenterPublisher,
    MavenPublisher,
    Publisher,
    PublishRequest,
    publisher_for,
)

__all__ = [
    "CONTAINER_YARN_KEY",
    "DEFAULT_CONTAINER_VERSION",
    "CommandContainerGenerator",
    "ContainerGenerator",
    "ContainerPublicationOrchestrator",
    "GitHubPublisher",
    "JCenterPublisher",
    "MavenPublisher",
    "PublicationOutcome",
    "PublishRequest",
    "Publisher",
    "artifact_id",
    "compute_next_container_version",
    "perform_container_state_update",
    "publisher_for",
]
