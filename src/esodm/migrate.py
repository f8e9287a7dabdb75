"""선언된 인덱스 클래스 기준 Elasticsearch 인덱스 마이그레이션.

모델 모듈을 import해서 레지스트리를 채운 뒤, 인덱스가 선언된 모든 클래스에 대해
인덱스 생성(settings + 매핑)/삭제/상태 조회를 수행합니다.

Usage:
    python -m esodm.migrate --models myapp.models status
    python -m esodm.migrate --models myapp.models create
    python -m esodm.migrate --models myapp.models drop --confirm
    python -m esodm.migrate --models myapp.models recreate --confirm

환경변수:
    ES_URL: Elasticsearch URL (기본: http://localhost:9200)
    ES_USERNAME: Basic Auth 사용자명 (선택)
    ES_PASSWORD: Basic Auth 비밀번호 (선택)
    ES_INDEX_PREFIX: 인덱스명 prefix (선택)
    ESODM_MODELS: --models 기본값
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import os
import sys
from dataclasses import dataclass

from .client import check_connection
from .config import ESConfig
from .odm import ODM

# =============================================================================
# Migrator
# =============================================================================


@dataclass
class IndexInfo:
    """인덱스 정보."""

    name: str
    exists: bool
    doc_count: int = 0
    size_bytes: int = 0


class Migrator:
    """인덱스 클래스 기반 마이그레이션 관리자."""

    def __init__(self, odm: ODM):
        self.odm = odm

    def _name(self, cls: type) -> str:
        return self.odm.store.get_index_descriptor(
            cls, index_prefix=self.odm.options.index_prefix
        ).index

    async def get_index_info(self, cls: type) -> IndexInfo:
        """인덱스 정보 조회."""
        index_name = self._name(cls)
        if not await self.odm.indices.exists(cls):
            return IndexInfo(name=index_name, exists=False)

        stats = await self.odm.es.indices.stats(index=index_name)
        index_stats = stats["indices"].get(index_name, {}).get("primaries", {})
        return IndexInfo(
            name=index_name,
            exists=True,
            doc_count=index_stats.get("docs", {}).get("count", 0),
            size_bytes=index_stats.get("store", {}).get("size_in_bytes", 0),
        )

    async def status(self) -> dict[str, IndexInfo]:
        """모든 관리 인덱스 상태 조회."""
        return {cls.__name__: await self.get_index_info(cls) for cls in self.odm.get_indices()}

    async def create_index(self, cls: type, *, skip_existing: bool = True) -> bool:
        """단일 인덱스 생성 후 매핑 등록."""
        if await self.odm.indices.exists(cls):
            if skip_existing:
                return True
            raise ValueError(f"인덱스 '{self._name(cls)}'이 이미 존재합니다.")

        await self.odm.indices.create(cls)
        await self.odm.indices.put_mapping(cls)
        return True

    async def create_all(self, *, skip_existing: bool = True) -> dict[str, bool]:
        return {
            cls.__name__: await self.create_index(cls, skip_existing=skip_existing)
            for cls in self.odm.get_indices()
        }

    async def drop_index(self, cls: type) -> bool:
        if await self.odm.indices.exists(cls):
            await self.odm.indices.delete(cls)
        return True

    async def drop_all(self) -> dict[str, bool]:
        return {cls.__name__: await self.drop_index(cls) for cls in self.odm.get_indices()}

    async def recreate_all(self) -> dict[str, bool]:
        """모든 인덱스 재생성 (drop + create)."""
        await self.drop_all()
        return await self.create_all(skip_existing=False)


# =============================================================================
# CLI
# =============================================================================


def _format_bytes(size_bytes: int | float) -> str:
    """바이트를 읽기 쉬운 형식으로 변환."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def _print_results(results: dict[str, bool]) -> None:
    for name, success in results.items():
        emoji = "✅" if success else "❌"
        print(f"   {emoji} {name}")
    print("\n✨ Done!")


async def cmd_status(migrator: Migrator) -> int:
    """인덱스 상태 출력."""
    print("\n📊 Elasticsearch Index Status")
    print("=" * 50)

    for name, info in (await migrator.status()).items():
        emoji = "✅" if info.exists else "❌"
        print(f"\n{emoji} {name}: {info.name}")
        if info.exists:
            print(f"   Documents: {info.doc_count:,}")
            print(f"   Size: {_format_bytes(info.size_bytes)}")

    print()
    return 0


async def cmd_create(migrator: Migrator) -> int:
    print("\n🔧 Creating indices...")
    results = await migrator.create_all(skip_existing=True)
    _print_results(results)
    return 0 if all(results.values()) else 1


async def cmd_drop(migrator: Migrator, confirm: bool) -> int:
    if not confirm:
        print("\n⚠️  --confirm 플래그를 추가해야 삭제됩니다.")
        print("   이 작업은 모든 데이터를 삭제합니다!")
        return 1

    print("\n🗑️  Dropping indices...")
    _print_results(await migrator.drop_all())
    return 0


async def cmd_recreate(migrator: Migrator, confirm: bool) -> int:
    if not confirm:
        print("\n⚠️  --confirm 플래그를 추가해야 재생성됩니다.")
        print("   이 작업은 모든 데이터를 삭제합니다!")
        return 1

    print("\n♻️  Recreating indices...")
    _print_results(await migrator.recreate_all())
    return 0


async def _run(args: argparse.Namespace) -> int:
    cfg = ESConfig()
    odm = ODM(cfg)
    try:
        if not await check_connection(odm.es):
            print(f"\n❌ Elasticsearch 연결 실패: {cfg.es_url}")
            return 1
        print(f"\n🔗 Connected to: {cfg.es_url}")

        migrator = Migrator(odm)
        if args.command == "status":
            return await cmd_status(migrator)
        elif args.command == "create":
            return await cmd_create(migrator)
        elif args.command == "drop":
            return await cmd_drop(migrator, args.confirm)
        elif args.command == "recreate":
            return await cmd_recreate(migrator, args.confirm)
        return 1
    finally:
        await odm.close()


def main(argv: list[str] | None = None) -> int:
    """CLI 진입점."""
    parser = argparse.ArgumentParser(
        description="esodm 인덱스 마이그레이션 도구",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
환경변수:
  ES_URL             Elasticsearch URL (기본: http://localhost:9200)
  ES_USERNAME        Basic Auth 사용자명
  ES_PASSWORD        Basic Auth 비밀번호
  ES_INDEX_PREFIX    인덱스명 prefix
  ESODM_MODELS       --models 기본값
""",
    )
    parser.add_argument(
        "--models",
        default=os.getenv("ESODM_MODELS"),
        help="인덱스 클래스가 선언된 모듈 (예: myapp.models)",
    )
    subparsers = parser.add_subparsers(dest="command", help="명령어")

    subparsers.add_parser("status", help="인덱스 상태 확인")
    subparsers.add_parser("create", help="인덱스 생성")

    drop_parser = subparsers.add_parser("drop", help="인덱스 삭제")
    drop_parser.add_argument("--confirm", action="store_true", help="삭제 확인 (필수)")

    recreate_parser = subparsers.add_parser("recreate", help="인덱스 재생성")
    recreate_parser.add_argument("--confirm", action="store_true", help="재생성 확인 (필수)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if not args.models:
        print("\n❌ --models 또는 ESODM_MODELS를 지정하세요.")
        return 1

    try:
        # 모델 모듈 import 시점에 레지스트리가 채워짐
        importlib.import_module(args.models)
    except ImportError as e:
        print(f"\n❌ 모델 모듈을 불러올 수 없습니다 ({args.models}): {e}")
        return 1

    try:
        return asyncio.run(_run(args))
    except Exception as e:
        print(f"\n❌ Elasticsearch 오류: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
