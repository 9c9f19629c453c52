from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from ern.cli.prompts import TyperDecisions
from ern.core.config import Config, load_config
from ern.core.errors import ErrorCode
from ern.core.result import Err
from ern.output.console import ConsoleProtocol, RichConsole
from ern.services.cauldron.medium import FileMedium, GitMedium
from ern.services.cauldron.transaction import TransactionManager
from ern.services.container.generator import CommandContainerGenerator
from ern.services.container.orchestrator import ContainerPublicationOrchestrator
from ern.services.decisions import DecisionProvider
from ern.services.operations import CauldronOperations
from ern.services.registry import NpmRegistry, PackageRegistry
from ern.services.validation import ValidationContext, ValidationEngine

CONFIG_FILE = "ern.toml"
CONFIG_ENV = "ERN_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol
    tm: TransactionManager
    registry: PackageRegistry
    decisions: DecisionProvider
    missing_cauldron: Path | None = None

    def validation(self) -> ValidationEngine:
        if self.missing_cauldron is not None:
            context = ValidationContext(None, self.registry, location=str(self.missing_cauldron))
        else:
            context = ValidationContext(self.tm.store, self.registry)
        return ValidationEngine(context, self.console)

    def operations(self) -> CauldronOperations:
        generator = CommandContainerGenerator(self.config.container.generator)
        orchestrator = ContainerPublicationOrchestrator(
            generator=generator,
            config=self.config.container,
            console=self.console,
        )
        return CauldronOperations(
            tm=self.tm,
            orchestrator=orchestrator,
            validation=self.validation(),
        )


def config_path() -> Path:
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser()
    return Path.cwd() / CONFIG_FILE


def cauldron_dir(root: Path, config: Config) -> Path:
    path = Path(config.cauldron.path).expanduser()
    return path if path.is_absolute() else root / path


def build_context() -> CLIContext:
    console = RichConsole()

    path = config_path()
    root = path.parent.resolve()
    config = Config()
    if path.exists():
        loaded = load_config(path)
        if isinstance(loaded, Err):
            typer.echo(f"error: {loaded.error.message}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        config = loaded.value

    directory = cauldron_dir(root, config)
    medium = GitMedium(directory) if config.cauldron.git else FileMedium(directory)
    opened = TransactionManager.open(medium, console)
    if isinstance(opened, Err):
        typer.echo(f"error: {opened.error.message}", err=True)
        if opened.error.hint:
            typer.echo(f"hint: {opened.error.hint}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        root=root,
        config=config,
        console=console,
        tm=opened.value,
        registry=NpmRegistry.from_config(config.registry, cwd=root),
        decisions=TyperDecisions(),
        missing_cauldron=None if medium.path.is_file() else medium.path,
    )
