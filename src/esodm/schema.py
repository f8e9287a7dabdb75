"""PropertyTree -> Elasticsearch 매핑 정의 변환.

결과에는 클래스 참조 등 파이썬 객체가 남지 않으며, 레지스트리와 독립된 복사본입니다.
"""

from __future__ import annotations

import copy
from typing import Any

from .registry import FieldKind, MetadataStore, PropertyDescriptor, PropertyTree, metadata_store


def _compile_property(descriptor: PropertyDescriptor) -> dict[str, Any]:
    compiled = copy.deepcopy(dict(descriptor.options))
    if descriptor.kind is FieldKind.LEAF:
        return compiled

    compiled["type"] = descriptor.kind.value
    compiled["properties"] = compile_mapping(descriptor.schema or {})
    return compiled


def compile_mapping(tree: PropertyTree) -> dict[str, Any]:
    """PropertyTree를 순수 매핑 dict로 변환 (임베디드 스키마는 재귀 변환)."""
    return {name: _compile_property(descriptor) for name, descriptor in tree.items()}


def mapping_body(cls: type, store: MetadataStore = metadata_store) -> dict[str, Any]:
    """put_mapping 요청 본문."""
    return {
        "dynamic": "strict",
        "properties": compile_mapping(store.get_property_tree(cls)),
    }
