"""Schema 公共基类"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """对外 JSON 使用 camelCase，内部字段保持 snake_case"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    """通用成功响应"""

    success: bool = True
