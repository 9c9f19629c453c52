"""Cauldron data model.

A cauldron snapshot is an immutable tree:

    CauldronData -> NativeApp -> PlatformNode -> VersionNode

Mutations build a new tree (``dataclasses.replace``), so a working copy can
share structure with the durable snapshot without ever mutating it.

The JSON layout mirrors the historical ``cauldron.json`` document:

    {
      "schema": 1,
      "nativeApps": [
        {"name": "myapp", "platforms": [
          {"name": "android", "versions": [
            {"name": "1.0", "isReleased": false, "containerVersion": "1.0.3",
             "nativeDeps": ["react-native@0.42.0"], "miniApps": [...],
             "jsApiImpls": [...], "yarnLocks": {"container": "<sha256>"},
             "config": {"containerGenerator": {"publishers": [
               {"name": "maven", "url": "...", "mavenUser": "...", "mavenPassword": "..."}
             ]}}}
          ]}
        ]}
      ],
      "blobs": {"<sha256>": "<yarn.lock content>"}
    }
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Literal, cast

from ern.core.result import Err, Ok, Result
from ern.core.structured import (
    as_obj_list,
    as_str_dict,
    get_bool,
    get_int,
    get_list,
    get_str,
    get_str_list,
    get_table,
)
from ern.services.cauldron.descriptor import (
    PLATFORMS,
    NativeApplicationDescriptor,
    Platform,
    is_valid_part,
)
from ern.services.cauldron.errors import CauldronError

SCHEMA_VERSION = 1

PublisherKind = Literal["github", "maven", "jcenter"]
PUBLISHER_KINDS: tuple[PublisherKind, ...] = ("github", "maven", "jcenter")


@dataclass(frozen=True, slots=True)
class Credentials:
    user: str
    password: str


@dataclass(frozen=True, slots=True)
class PublisherSpec:
    kind: PublisherKind
    url: str
    credentials: Credentials | None = None


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    publishers: tuple[PublisherSpec, ...] = ()


@dataclass(frozen=True, slots=True)
class VersionNode:
    version: str  # raw, never rewritten
    is_released: bool = False
    container_version: str | None = None
    native_deps: tuple[str, ...] = ()
    miniapps: tuple[str, ...] = ()
    js_api_impls: tuple[str, ...] = ()
    lock_files: tuple[tuple[str, str], ...] = ()
    generator_config: GeneratorConfig | None = None

    def lock_file(self, key: str) -> str | None:
        for k, ref in self.lock_files:
            if k == key:
                return ref
        return None

    def with_lock_file(self, key: str, reference: str) -> VersionNode:
        others = tuple((k, ref) for k, ref in self.lock_files if k != key)
        return replace(self, lock_files=(*others, (key, reference)))


@dataclass(frozen=True, slots=True)
class PlatformNode:
    name: Platform
    versions: tuple[VersionNode, ...] = ()

    def version(self, raw: str) -> VersionNode | None:
        for node in self.versions:
            if node.version == raw:
                return node
        return None


@dataclass(frozen=True, slots=True)
class NativeApp:
    name: str
    platforms: tuple[PlatformNode, ...] = ()

    def platform(self, name: str) -> PlatformNode | None:
        for node in self.platforms:
            if node.name == name:
                return node
        return None


@dataclass(frozen=True, slots=True)
class CauldronData:
    schema: int = SCHEMA_VERSION
    apps: tuple[NativeApp, ...] = ()
    blobs: tuple[tuple[str, str], ...] = ()

    def app(self, name: str) -> NativeApp | None:
        for app in self.apps:
            if app.name == name:
                return app
        return None

    def platform_node(self, name: str, platform: str) -> PlatformNode | None:
        app = self.app(name)
        return app.platform(platform) if app is not None else None

    def version_node(self, descriptor: NativeApplicationDescriptor) -> VersionNode | None:
        if descriptor.platform is None or descriptor.version is None:
            return None
        node = self.platform_node(descriptor.name, descriptor.platform)
        return node.version(descriptor.version) if node is not None else None

    def blob(self, digest: str) -> str | None:
        for key, content in self.blobs:
            if key == digest:
                return content
        return None

    def with_blob(self, digest: str, content: str) -> CauldronData:
        if self.blob(digest) is not None:
            return self
        return replace(self, blobs=(*self.blobs, (digest, content)))

    def replace_version_node(
        self,
        descriptor: NativeApplicationDescriptor,
        update: Callable[[VersionNode], VersionNode],
    ) -> CauldronData:
        """Return a copy with one version node replaced; order is preserved."""

        def on_platform(p: PlatformNode) -> PlatformNode:
            if p.name != descriptor.platform:
                return p
            versions = tuple(
                update(v) if v.version == descriptor.version else v for v in p.versions
            )
            return replace(p, versions=versions)

        def on_app(a: NativeApp) -> NativeApp:
            if a.name != descriptor.name:
                return a
            return replace(a, platforms=tuple(on_platform(p) for p in a.platforms))

        return replace(self, apps=tuple(on_app(a) for a in self.apps))


# -----------------------------------------------------------------------------
# JSON snapshot codec
# -----------------------------------------------------------------------------


def _publisher_to_dict(spec: PublisherSpec) -> dict[str, object]:
    out: dict[str, object] = {"name": spec.kind, "url": spec.url}
    if spec.credentials is not None:
        out["mavenUser"] = spec.credentials.user
        out["mavenPassword"] = spec.credentials.password
    return out


def _version_to_dict(node: VersionNode) -> dict[str, object]:
    out: dict[str, object] = {
        "name": node.version,
        "isReleased": node.is_released,
        "nativeDeps": list(node.native_deps),
        "miniApps": list(node.miniapps),
        "jsApiImpls": list(node.js_api_impls),
        "yarnLocks": dict(node.lock_files),
    }
    if node.container_version is not None:
        out["containerVersion"] = node.container_version
    if node.generator_config is not None:
        out["config"] = {
            "containerGenerator": {
                "publishers": [_publisher_to_dict(p) for p in node.generator_config.publishers]
            }
        }
    return out


def snapshot_to_dict(data: CauldronData) -> dict[str, object]:
    return {
        "schema": data.schema,
        "nativeApps": [
            {
                "name": app.name,
                "platforms": [
                    {"name": p.name, "versions": [_version_to_dict(v) for v in p.versions]}
                    for p in app.platforms
                ],
            }
            for app in data.apps
        ],
        "blobs": dict(data.blobs),
    }


def _invalid(message: str) -> Err[CauldronError]:
    return Err(CauldronError(kind="invalid_input", message=f"invalid cauldron document: {message}"))


def _publisher_from_dict(obj: object) -> PublisherSpec | None:
    data = as_str_dict(obj)
    if data is None:
        return None
    kind = get_str(data, "name")
    if kind not in PUBLISHER_KINDS:
        return None
    user = get_str(data, "mavenUser")
    password = get_str(data, "mavenPassword")
    credentials = Credentials(user, password) if user and password else None
    return PublisherSpec(
        kind=cast(PublisherKind, kind),
        url=get_str(data, "url") or "",
        credentials=credentials,
    )


def _version_from_dict(data: Mapping[str, object]) -> Result[VersionNode, CauldronError]:
    raw = data.get("name")
    if not isinstance(raw, str) or not raw:
        return _invalid("version without a name")
    if not is_valid_part(raw):
        return _invalid(f"invalid version name {raw!r}")

    generator_config: GeneratorConfig | None = None
    container_gen = get_table(get_table(data, "config") or {}, "containerGenerator")
    if container_gen is not None:
        publishers: list[PublisherSpec] = []
        for item in get_list(container_gen, "publishers") or []:
            spec = _publisher_from_dict(item)
            if spec is None:
                return _invalid(f"unsupported publisher in version {raw}: {item!r}")
            publishers.append(spec)
        generator_config = GeneratorConfig(publishers=tuple(publishers))

    locks = get_table(data, "yarnLocks") or {}
    return Ok(
        VersionNode(
            version=raw,
            is_released=bool(get_bool(data, "isReleased")),
            container_version=get_str(data, "containerVersion"),
            native_deps=tuple(get_str_list(data, "nativeDeps")),
            miniapps=tuple(get_str_list(data, "miniApps")),
            js_api_impls=tuple(get_str_list(data, "jsApiImpls")),
            lock_files=tuple((k, v) for k, v in locks.items() if isinstance(v, str)),
            generator_config=generator_config,
        )
    )


def snapshot_from_dict(obj: object) -> Result[CauldronData, CauldronError]:
    """Decode a JSON document into a snapshot, rejecting duplicate entries."""
    data = as_str_dict(obj)
    if data is None:
        return _invalid("root must be an object")

    schema = get_int(data, "schema") or SCHEMA_VERSION
    if schema != SCHEMA_VERSION:
        return _invalid(f"unsupported schema {schema}")

    apps: list[NativeApp] = []
    for app_obj in get_list(data, "nativeApps") or []:
        app_data = as_str_dict(app_obj)
        name = get_str(app_data, "name") if app_data is not None else None
        if app_data is None or name is None:
            return _invalid("native application without a name")
        if not is_valid_part(name):
            return _invalid(f"invalid native application name {name!r}")
        if any(a.name == name for a in apps):
            return _invalid(f"duplicate native application {name}")

        platforms: list[PlatformNode] = []
        for p_obj in as_obj_list(app_data.get("platforms")) or []:
            p_data = as_str_dict(p_obj)
            p_name = get_str(p_data, "name") if p_data is not None else None
            if p_data is None or p_name not in PLATFORMS:
                return _invalid(f"unsupported platform in {name}: {p_obj!r}")
            if any(p.name == p_name for p in platforms):
                return _invalid(f"duplicate platform {p_name} in {name}")

            versions: list[VersionNode] = []
            for v_obj in get_list(p_data, "versions") or []:
                v_data = as_str_dict(v_obj)
                if v_data is None:
                    return _invalid(f"version entry in {name}:{p_name} must be an object")
                node = _version_from_dict(v_data)
                if isinstance(node, Err):
                    return node
                if any(v.version == node.value.version for v in versions):
                    return _invalid(f"duplicate version {node.value.version} in {name}:{p_name}")
                versions.append(node.value)

            platforms.append(PlatformNode(name=cast(Platform, p_name), versions=tuple(versions)))
        apps.append(NativeApp(name=name, platforms=tuple(platforms)))

    blobs = get_table(data, "blobs") or {}
    return Ok(
        CauldronData(
            schema=schema,
            apps=tuple(apps),
            blobs=tuple((k, v) for k, v in blobs.items() if isinstance(v, str)),
        )
    )
