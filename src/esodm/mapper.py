"""ES `_source` <-> 도메인 객체 변환.

reconstruct는 조회 결과(raw dict)로 객체 그래프를 재구성하고,
dump는 반대로 객체를 전송용 dict로 직렬화합니다.
스토어와 통신하지 않는 순수 동기 함수입니다.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .registry import FieldKind, MetadataStore, PropertyDescriptor, PropertyTree, metadata_store


def _instantiate(cls: type, tree: PropertyTree, source: Mapping[str, Any] | None) -> Any:
    if source is None:
        return None

    # __init__을 거치지 않음: source에 없는 필드는 미설정 상태로 둔다
    instance = cls.__new__(cls)
    for name, descriptor in tree.items():
        if name in source:
            setattr(instance, name, _structured_value(descriptor, source[name]))
    return instance


def _structured_value(descriptor: PropertyDescriptor, raw: Any) -> Any:
    if descriptor.kind is FieldKind.LEAF or descriptor.cls is None:
        return raw

    # 선언 종류가 아니라 raw 값의 모양으로 분기: ES는 object에 배열, nested에 단일 객체도 허용
    schema = descriptor.schema or {}
    if isinstance(raw, list):
        return [_embedded_value(descriptor.cls, schema, item) for item in raw]
    if isinstance(raw, Mapping):
        instance = _instantiate(descriptor.cls, schema, raw)
        return [instance] if descriptor.kind is FieldKind.NESTED else instance
    return raw


def _embedded_value(cls: type, tree: PropertyTree, raw: Any) -> Any:
    if isinstance(raw, Mapping):
        return _instantiate(cls, tree, raw)
    return raw


def reconstruct(cls: type, source: Any, store: MetadataStore = metadata_store) -> Any:
    """raw source로 cls 인스턴스 재구성.

    Args:
        cls: 필드가 선언된 클래스
        source: `_source` dict, dict 리스트, 또는 None

    Returns:
        None이면 None, 리스트면 인스턴스 리스트, 그 외에는 인스턴스 하나.
        선언되지 않은 키는 무시합니다.
    """
    if source is None:
        return None

    tree = store.get_property_tree(cls)
    if isinstance(source, list):
        return [_instantiate(cls, tree, item) for item in source]
    return _instantiate(cls, tree, source)


def _dump_value(descriptor: PropertyDescriptor, value: Any) -> Any:
    if descriptor.kind is FieldKind.LEAF or value is None:
        return value

    schema = descriptor.schema or {}
    if descriptor.kind is FieldKind.NESTED:
        return [_dump_with_tree(schema, item) for item in value]
    return _dump_with_tree(schema, value)


def _dump_with_tree(tree: PropertyTree, document: Any) -> Any:
    if document is None:
        return None
    if isinstance(document, Mapping):
        return dict(document)

    source: dict[str, Any] = {}
    for name, descriptor in tree.items():
        if hasattr(document, name):
            source[name] = _dump_value(descriptor, getattr(document, name))
    return source


def dump(cls: type, document: Any, store: MetadataStore = metadata_store) -> dict[str, Any]:
    """문서를 ES 전송용 dict로 변환.

    dict는 얕은 복사로 그대로 전달하고, 인스턴스는 설정된 선언 필드만 직렬화합니다.
    """
    if isinstance(document, Mapping):
        return dict(document)
    return _dump_with_tree(store.get_property_tree(cls), document)
