"""esodm 예외 정의.

메타데이터/검증 오류는 모두 스토어 호출 이전에 동기적으로 발생합니다.
Elasticsearch 클라이언트가 던지는 오류는 감싸지 않고 그대로 전파됩니다.
"""

from __future__ import annotations


class ODMError(Exception):
    """esodm에서 발생하는 모든 오류의 기본 클래스."""


class IndexUndefinedError(ODMError, ValueError):
    """인덱스 경로/옵션이 빈 인덱스명으로 해석된 경우."""


class DuplicateFieldError(ODMError, ValueError):
    """같은 클래스에 동일한 필드명이 두 번 선언된 경우."""


class DuplicatePrimaryError(ODMError, ValueError):
    """이미 primary 필드가 있는 클래스에 primary를 다시 선언한 경우."""


class MissingIndexError(ODMError, LookupError):
    """인덱스가 선언되지 않은 클래스를 사용한 경우."""


class MissingPropertiesError(ODMError, LookupError):
    """필드가 하나도 선언되지 않은 클래스를 사용한 경우."""


class MissingPrimaryKeyDefinitionError(ODMError, LookupError):
    """primary 필드 없이 문서에서 id를 꺼내려 한 경우."""


class DocumentMissingError(ODMError, ValueError):
    """쓰기 요청에 문서가 없는 경우."""


class IdMissingError(ODMError, ValueError):
    """delete/update 요청에 id가 없는 경우."""


class RegistryFrozenError(ODMError, RuntimeError):
    """freeze() 이후에 메타데이터를 선언하려 한 경우."""
