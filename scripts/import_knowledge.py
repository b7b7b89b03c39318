"""知识库导入脚本 - 从 JSON 导入产品、方案与知识条目

文件格式（字段名与管理后台 API 一致，camelCase）:
{
  "products": [{"name": "...", "category": "...", "dosageInfo": "..."}],
  "protocols": [{"title": "...", "category": "...", "targetGoal": "cutting", "protocolSteps": ["..."]}],
  "knowledge": [{"category": "safety_info", "title": "...", "content": "...", "priority": 5}]
}

运行中的服务会在知识库缓存 TTL 到期后看到新数据。
"""

import asyncio
import json
import sys
from pathlib import Path

# 添加项目根目录到 Python 路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from app.core.database import close_db, get_db_context, init_db
from app.models.knowledge import KnowledgeEntry
from app.models.product import Product
from app.models.protocol import Protocol
from app.repositories.knowledge import (
    KnowledgeEntryRepository,
    ProductRepository,
    ProtocolRepository,
)
from app.schemas.knowledge import KnowledgeEntryCreate, ProductCreate, ProtocolCreate

SECTIONS = {
    "products": (ProductCreate, Product, ProductRepository),
    "protocols": (ProtocolCreate, Protocol, ProtocolRepository),
    "knowledge": (KnowledgeEntryCreate, KnowledgeEntry, KnowledgeEntryRepository),
}


async def import_knowledge(json_path: Path) -> None:
    """导入知识库数据"""
    print(f"[import] 开始导入: {json_path}")

    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)

    await init_db()

    async with get_db_context() as session:
        for section, (schema, model, repo_cls) in SECTIONS.items():
            repo = repo_cls(session)
            imported = 0
            for index, raw in enumerate(data.get(section, [])):
                try:
                    item = schema.model_validate(raw)
                except ValidationError as e:
                    print(f"[skip] {section}[{index}] 数据无效: {e.errors()[0]['msg']}")
                    continue
                await repo.create(model(**item.model_dump()))
                imported += 1
            print(f"[import] {section}: 已导入 {imported} 条")

    await close_db()
    print("[import] 导入完成!")


def main():
    """主函数"""
    if len(sys.argv) < 2:
        # 默认使用 data/knowledge.json
        json_path = Path(__file__).parent.parent / "data" / "knowledge.json"
    else:
        json_path = Path(sys.argv[1])

    if not json_path.exists():
        print(f"[error] 文件不存在: {json_path}")
        print(__doc__)
        sys.exit(1)

    try:
        asyncio.run(import_knowledge(json_path))
    except KeyboardInterrupt:
        print("\n[import] 导入已取消")
        sys.exit(1)


if __name__ == "__main__":
    main()
