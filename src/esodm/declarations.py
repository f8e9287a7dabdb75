"""선언적 스키마 API: field(), @index, @embedded.

Usage:
    >>> @embedded
    ... class Address:
    ...     city = field("keyword")
    ...
    >>> @index("twitter/user", settings={"number_of_shards": 1})
    ... class User:
    ...     user_id = field("keyword", primary=True)
    ...     name = field({"type": "text", "analyzer": "standard"})
    ...     address = field(object=Address)
    ...     history = field(nested=Address)

참조 클래스(object/nested)는 참조하는 클래스보다 먼저 선언되어야 합니다.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from .registry import FieldKind, MetadataStore, PropertyDescriptor, metadata_store

T = TypeVar("T", bound=type)


class Field:
    """클래스 본문에 놓이는 필드 마커. 데코레이터가 레지스트리에 등록한 뒤 클래스에서 제거합니다."""

    def __init__(self, options: Mapping[str, Any], primary: bool = False):
        opts = dict(options)
        self.kind = FieldKind.LEAF
        self.target: type | None = None

        for kind in (FieldKind.OBJECT, FieldKind.NESTED):
            target = opts.pop(kind.value, None)
            if target is not None:
                self.kind = kind
                self.target = target
                break

        self.options = opts
        self.primary = primary

    def describe(self, store: MetadataStore) -> PropertyDescriptor:
        if self.target is None:
            return PropertyDescriptor.leaf(self.options)
        # 참조 스키마는 이 시점의 스냅샷으로 고정
        return PropertyDescriptor.embedded(
            self.kind, self.target, store.get_property_tree(self.target), self.options
        )

    def __repr__(self) -> str:
        target = f", {self.kind.value}={self.target.__name__}" if self.target else ""
        return f"Field({self.options!r}{target})"


def field(
    type_or_options: str | Mapping[str, Any] | None = None,
    *,
    primary: bool = False,
    **options: Any,
) -> Any:
    """필드 선언.

    Args:
        type_or_options: ES 타입명("text", "integer" 등) 또는 매핑 옵션 dict
        primary: 이 필드를 문서 id로 사용할지 여부
        **options: 추가 매핑 옵션. object=<Class> / nested=<Class>로 임베디드 문서 지정

    Returns:
        Field 마커 (클래스 본문에 할당)
    """
    merged: dict[str, Any] = {}
    if isinstance(type_or_options, str):
        merged["type"] = type_or_options
    elif isinstance(type_or_options, Mapping):
        merged.update(type_or_options)
    merged.update(options)
    return Field(merged, primary=primary)


def _register_fields(cls: type, store: MetadataStore) -> None:
    markers = [(name, value) for name, value in vars(cls).items() if isinstance(value, Field)]
    for name, marker in markers:
        store.declare_field(cls, name, marker.describe(store))
        if marker.primary:
            store.declare_primary(cls, name)
        # 값이 쓰이지 않은 인스턴스 속성은 미설정 상태로 남도록 마커 제거
        delattr(cls, name)


def embedded(cls: T | None = None, *, store: MetadataStore = metadata_store) -> Any:
    """object/nested 필드로만 쓰이는 클래스 데코레이터 (인덱스 없음)."""

    def decorate(target: T) -> T:
        _register_fields(target, store)
        return target

    if cls is not None:
        return decorate(cls)
    return decorate


def index(
    path_or_options: str | Mapping[str, Any] | type | None = None,
    *,
    store: MetadataStore = metadata_store,
    **options: Any,
) -> Callable[[T], T] | Any:
    """인덱스 클래스 데코레이터.

    Args:
        path_or_options: "index" 또는 "index/type" 경로, 혹은 {index, type, settings} dict
        store: 등록할 레지스트리
        **options: index / type / settings 옵션 (경로가 주어지면 경로가 우선)
    """

    def decorate(target: T) -> T:
        _register_fields(target, store)
        if isinstance(path_or_options, type):
            store.declare_index(target, None, options)
        else:
            store.declare_index(target, path_or_options, options)
        return target

    # @index 처럼 괄호 없이 쓴 경우
    if isinstance(path_or_options, type):
        return decorate(path_or_options)
    return decorate
