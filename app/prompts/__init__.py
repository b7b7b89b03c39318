"""提示词模板"""

from app.prompts.consultation import (
    ANALYSIS_TEMPLATE,
    CHAT_TEMPLATE,
    CONSULTATION_TEMPLATE,
    HISTORY_WINDOW,
)

__all__ = [
    "ANALYSIS_TEMPLATE",
    "CHAT_TEMPLATE",
    "CONSULTATION_TEMPLATE",
    "HISTORY_WINDOW",
]
