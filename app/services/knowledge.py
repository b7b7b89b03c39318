"""知识库服务（产品、方案、知识条目的增删改查）

所有写操作由 invalidates_knowledge_cache 包装：提交事务后立即让
ConfigCache 失效，路由层无需关心缓存。
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import raise_bad_request, raise_not_found
from app.core.logging import get_logger
from app.models.base import Base
from app.models.knowledge import KnowledgeEntry
from app.models.product import Product
from app.models.protocol import Protocol
from app.repositories.knowledge import (
    KnowledgeEntryRepository,
    ProductRepository,
    ProtocolRepository,
)
from app.schemas.knowledge import (
    KnowledgeEntryCreate,
    KnowledgeEntryResponse,
    KnowledgeEntryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ProtocolCreate,
    ProtocolResponse,
    ProtocolUpdate,
    check_experience_range,
)
from app.services.config_cache import ConfigCache

logger = get_logger("services.knowledge")

P = ParamSpec("P")
R = TypeVar("R")


def invalidates_knowledge_cache(
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """写操作装饰器：commit 之后调用 cache.invalidate()"""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        store: KnowledgeStore = args[0]  # type: ignore[assignment]
        result = await func(*args, **kwargs)
        await store.db.commit()
        store.cache.invalidate()
        return result

    return wrapper


class KnowledgeStore:
    """知识库服务"""

    def __init__(self, db: AsyncSession, cache: ConfigCache):
        self.db = db
        self.cache = cache
        self.products = ProductRepository(db)
        self.protocols = ProtocolRepository(db)
        self.entries = KnowledgeEntryRepository(db)

    # ========== 产品 ==========

    async def list_products(self) -> list[ProductResponse]:
        rows = await self.products.list_all()
        return [ProductResponse.model_validate(row) for row in rows]

    @invalidates_knowledge_cache
    async def create_product(self, data: ProductCreate) -> ProductResponse:
        product = await self.products.create(Product(**data.model_dump()))
        logger.info("产品已创建", product_id=product.id, name=product.name)
        return ProductResponse.model_validate(product)

    @invalidates_knowledge_cache
    async def update_product(self, product_id: int, data: ProductUpdate) -> ProductResponse:
        product = await self.products.get_by_id(product_id)
        if product is None:
            raise_not_found("product", "Produto não encontrado", product_id)
        product = await self.products.update(product, _changes(data, Product))
        logger.info("产品已更新", product_id=product_id)
        return ProductResponse.model_validate(product)

    @invalidates_knowledge_cache
    async def delete_product(self, product_id: int) -> None:
        product = await self.products.get_by_id(product_id)
        if product is None:
            raise_not_found("product", "Produto não encontrado", product_id)
        await self.products.delete(product)
        logger.info("产品已删除", product_id=product_id)

    # ========== 方案 ==========

    async def list_protocols(self) -> list[ProtocolResponse]:
        rows = await self.protocols.list_all()
        return [ProtocolResponse.model_validate(row) for row in rows]

    @invalidates_knowledge_cache
    async def create_protocol(self, data: ProtocolCreate) -> ProtocolResponse:
        protocol = await self.protocols.create(Protocol(**data.model_dump()))
        logger.info("方案已创建", protocol_id=protocol.id, title=protocol.title)
        return ProtocolResponse.model_validate(protocol)

    @invalidates_knowledge_cache
    async def update_protocol(self, protocol_id: int, data: ProtocolUpdate) -> ProtocolResponse:
        protocol = await self.protocols.get_by_id(protocol_id)
        if protocol is None:
            raise_not_found("protocol", "Protocolo não encontrado", protocol_id)
        changes = _changes(data, Protocol)
        # 只改一端时与库中另一端比较
        try:
            check_experience_range(
                changes.get("min_experience", protocol.min_experience),
                changes.get("max_experience", protocol.max_experience),
            )
        except ValueError as e:
            raise_bad_request("invalid_experience_range", str(e))
        protocol = await self.protocols.update(protocol, changes)
        logger.info("方案已更新", protocol_id=protocol_id)
        return ProtocolResponse.model_validate(protocol)

    @invalidates_knowledge_cache
    async def delete_protocol(self, protocol_id: int) -> None:
        protocol = await self.protocols.get_by_id(protocol_id)
        if protocol is None:
            raise_not_found("protocol", "Protocolo não encontrado", protocol_id)
        await self.protocols.delete(protocol)
        logger.info("方案已删除", protocol_id=protocol_id)

    # ========== 知识条目 ==========

    async def list_knowledge(self) -> list[KnowledgeEntryResponse]:
        rows = await self.entries.list_all()
        return [KnowledgeEntryResponse.model_validate(row) for row in rows]

    @invalidates_knowledge_cache
    async def create_knowledge(self, data: KnowledgeEntryCreate) -> KnowledgeEntryResponse:
        entry = await self.entries.create(KnowledgeEntry(**data.model_dump()))
        logger.info("知识条目已创建", entry_id=entry.id, title=entry.title)
        return KnowledgeEntryResponse.model_validate(entry)

    @invalidates_knowledge_cache
    async def update_knowledge(self, entry_id: int, data: KnowledgeEntryUpdate) -> KnowledgeEntryResponse:
        entry = await self.entries.get_by_id(entry_id)
        if entry is None:
            raise_not_found("knowledge", "Conhecimento não encontrado", entry_id)
        entry = await self.entries.update(entry, _changes(data, KnowledgeEntry))
        logger.info("知识条目已更新", entry_id=entry_id)
        return KnowledgeEntryResponse.model_validate(entry)

    @invalidates_knowledge_cache
    async def delete_knowledge(self, entry_id: int) -> None:
        entry = await self.entries.get_by_id(entry_id)
        if entry is None:
            raise_not_found("knowledge", "Conhecimento não encontrado", entry_id)
        await self.entries.delete(entry)
        logger.info("知识条目已删除", entry_id=entry_id)


def _changes(data: Any, model: type[Base]) -> dict[str, Any]:
    """部分更新：只取请求中显式给出的字段，非空列忽略 null"""
    columns = model.__table__.columns
    return {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or columns[key].nullable
    }
