"""클래스별 인덱스/필드 메타데이터 레지스트리.

클래스 선언 시점(모듈 import)에 한 번 채워지고, 이후에는 읽기 전용으로 사용됩니다.
초기화가 끝나면 freeze()로 잠가서 런타임 변경을 막을 수 있습니다.

Usage:
    >>> store = MetadataStore()
    >>> store.declare_index(Tweet, "twitter/tweet")
    >>> store.declare_field(Tweet, "message", PropertyDescriptor.leaf({"type": "text"}))
    >>> store.get_index_descriptor(Tweet, index_prefix="es1_").index
    'es1_twitter'
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

from .errors import (
    DuplicateFieldError,
    DuplicatePrimaryError,
    IndexUndefinedError,
    MissingIndexError,
    MissingPropertiesError,
    RegistryFrozenError,
)

PropertyTree = Mapping[str, "PropertyDescriptor"]


class FieldKind(str, Enum):
    """필드 종류. object/nested 값은 ES 매핑의 type과 동일."""

    LEAF = "leaf"
    OBJECT = "object"
    NESTED = "nested"


@dataclass(frozen=True)
class IndexDescriptor:
    """클래스 하나의 인덱스 정보.

    Attributes:
        index: 인덱스명 (prefix 미적용, 소문자)
        type: 타입명 (소문자)
        primary: id로 사용할 필드명
        settings: 인덱스 생성 시 전달할 설정
    """

    index: str
    type: str
    primary: str | None = None
    settings: Any = None


@dataclass(frozen=True)
class PropertyDescriptor:
    """필드 하나의 매핑 정보.

    object/nested 필드는 참조 클래스(cls)와, 선언 시점에 복사한 참조 스키마(schema)를 가집니다.
    """

    kind: FieldKind
    options: Mapping[str, Any]
    cls: type | None = None
    schema: PropertyTree | None = None

    @classmethod
    def leaf(cls, options: Mapping[str, Any]) -> PropertyDescriptor:
        return cls(kind=FieldKind.LEAF, options=MappingProxyType(dict(options)))

    @classmethod
    def embedded(
        cls,
        kind: FieldKind,
        target: type,
        schema: PropertyTree,
        options: Mapping[str, Any] | None = None,
    ) -> PropertyDescriptor:
        return cls(
            kind=kind,
            options=MappingProxyType(dict(options or {})),
            cls=target,
            schema=MappingProxyType(dict(schema)),
        )


def _resolve_index_names(
    cls: type,
    path_or_options: str | Mapping[str, Any] | None,
    options: Mapping[str, Any] | None,
) -> tuple[str, str, Any]:
    """"index/type" 경로 또는 옵션에서 (index, type, settings) 계산."""
    if isinstance(path_or_options, Mapping):
        opts = path_or_options
    else:
        opts = options or {}

    if isinstance(path_or_options, str):
        name = path_or_options or cls.__name__
    else:
        name = opts.get("index") or cls.__name__

    parts = name.split("/")
    index = parts[0]
    type_ = (parts[1] if len(parts) > 1 else "") or opts.get("type") or index

    if not index:
        raise IndexUndefinedError(f"Index undefined for class {cls.__name__} ({name!r})")

    return index.lower(), type_.lower(), opts.get("settings")


class MetadataStore:
    """클래스 -> (IndexDescriptor, PropertyTree) 레지스트리."""

    def __init__(self) -> None:
        self._indices: dict[type, IndexDescriptor] = {}
        self._properties: dict[type, dict[str, PropertyDescriptor]] = {}
        self._frozen = False

    # =========================================================================
    # Registration
    # =========================================================================

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """이후의 모든 선언을 금지."""
        self._frozen = True

    def _check_writable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Metadata store is frozen")

    def declare_index(
        self,
        cls: type,
        path_or_options: str | Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> IndexDescriptor:
        """클래스의 인덱스 선언. 기존 descriptor(primary 등)에 병합됩니다."""
        self._check_writable()
        index, type_, settings = _resolve_index_names(cls, path_or_options, options)

        current = self._indices.get(cls)
        if current is None:
            descriptor = IndexDescriptor(index=index, type=type_, settings=settings)
        else:
            descriptor = replace(
                current,
                index=index,
                type=type_,
                settings=settings if settings is not None else current.settings,
            )
        self._indices[cls] = descriptor
        return descriptor

    def declare_field(self, cls: type, name: str, descriptor: PropertyDescriptor) -> None:
        self._check_writable()
        properties = self._properties.setdefault(cls, {})
        if name in properties:
            raise DuplicateFieldError(f"Multiple declaration of field {cls.__name__}.{name}")
        properties[name] = descriptor

    def declare_primary(self, cls: type, name: str) -> None:
        self._check_writable()
        current = self._indices.get(cls)
        if current is not None and current.primary:
            raise DuplicatePrimaryError(
                f"Duplicate primary key for class {cls.__name__} ({current.primary}, {name})"
            )
        if current is None:
            # index 선언 전: 빈 index로 보관했다가 declare_index에서 병합
            self._indices[cls] = IndexDescriptor(index="", type="", primary=name)
        else:
            self._indices[cls] = replace(current, primary=name)

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_index_descriptor(self, cls: type, index_prefix: str = "") -> IndexDescriptor:
        """인덱스 descriptor 조회. prefix는 읽는 시점에만 적용됩니다."""
        descriptor = self._indices.get(cls)
        if descriptor is None or not descriptor.index:
            raise MissingIndexError(f"Index is missing for class {getattr(cls, '__name__', cls)}")
        if index_prefix:
            return replace(descriptor, index=f"{index_prefix}{descriptor.index}")
        return descriptor

    def get_property_tree(self, cls: type) -> PropertyTree:
        properties = self._properties.get(cls)
        if not properties:
            raise MissingPropertiesError(
                f"Properties are missing for class {getattr(cls, '__name__', cls)}"
            )
        return MappingProxyType(properties)

    def indexed_classes(self) -> list[type]:
        """인덱스가 선언된 모든 클래스 (선언 순서)."""
        return [cls for cls, descriptor in self._indices.items() if descriptor.index]


# 기본 전역 레지스트리
metadata_store = MetadataStore()
