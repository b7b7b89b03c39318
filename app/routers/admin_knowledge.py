"""管理后台知识库 API（产品、方案、知识条目）

写操作后的缓存失效由 KnowledgeStore 负责。
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_knowledge_store, require_admin
from app.core.rate_limit import admin_rate_limit
from app.schemas.common import SuccessResponse
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
)
from app.services.knowledge import KnowledgeStore

router = APIRouter(
    prefix="/api/admin",
    tags=["admin-knowledge"],
    dependencies=[Depends(admin_rate_limit), Depends(require_admin)],
)


# ========== 产品 ==========


@router.get("/products", response_model=list[ProductResponse])
async def list_products(store: KnowledgeStore = Depends(get_knowledge_store)):
    return await store.list_products()


@router.post("/products", response_model=ProductResponse)
async def create_product(request: ProductCreate, store: KnowledgeStore = Depends(get_knowledge_store)):
    return await store.create_product(request)


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    request: ProductUpdate,
    store: KnowledgeStore = Depends(get_knowledge_store),
):
    return await store.update_product(product_id, request)


@router.delete("/products/{product_id}", response_model=SuccessResponse)
async def delete_product(product_id: int, store: KnowledgeStore = Depends(get_knowledge_store)):
    await store.delete_product(product_id)
    return SuccessResponse()


# ========== 方案 ==========


@router.get("/protocols", response_model=list[ProtocolResponse])
async def list_protocols(store: KnowledgeStore = Depends(get_knowledge_store)):
    return await store.list_protocols()


@router.post("/protocols", response_model=ProtocolResponse)
async def create_protocol(request: ProtocolCreate, store: KnowledgeStore = Depends(get_knowledge_store)):
    return await store.create_protocol(request)


@router.put("/protocols/{protocol_id}", response_model=ProtocolResponse)
async def update_protocol(
    protocol_id: int,
    request: ProtocolUpdate,
    store: KnowledgeStore = Depends(get_knowledge_store),
):
    return await store.update_protocol(protocol_id, request)


@router.delete("/protocols/{protocol_id}", response_model=SuccessResponse)
async def delete_protocol(protocol_id: int, store: KnowledgeStore = Depends(get_knowledge_store)):
    await store.delete_protocol(protocol_id)
    return SuccessResponse()


# ========== 知识条目 ==========


@router.get("/knowledge", response_model=list[KnowledgeEntryResponse])
async def list_knowledge(store: KnowledgeStore = Depends(get_knowledge_store)):
    return await store.list_knowledge()


@router.post("/knowledge", response_model=KnowledgeEntryResponse)
async def create_knowledge(request: KnowledgeEntryCreate, store: KnowledgeStore = Depends(get_knowledge_store)):
    return await store.create_knowledge(request)


@router.put("/knowledge/{entry_id}", response_model=KnowledgeEntryResponse)
async def update_knowledge(
    entry_id: int,
    request: KnowledgeEntryUpdate,
    store: KnowledgeStore = Depends(get_knowledge_store),
):
    return await store.update_knowledge(entry_id, request)


@router.delete("/knowledge/{entry_id}", response_model=SuccessResponse)
async def delete_knowledge(entry_id: int, store: KnowledgeStore = Depends(get_knowledge_store)):
    await store.delete_knowledge(entry_id)
    return SuccessResponse()
