"""生理指标计算器

纯函数负责公式，CalculatorService 负责持久化输入与结果。
取整规则为"四舍五入，.5 向上"（与前端 Math.round 一致），
不使用 Python 的银行家舍入。
"""

import math
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.usage import UserCalculation
from app.repositories.usage import CalculationRepository
from app.schemas.calculators import CaloriesRequest, MacrosRequest, TmbRequest

logger = get_logger("services.calculators")

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentario": 1.2,
    "leve": 1.375,
    "moderado": 1.55,
    "intenso": 1.725,
    "muito_intenso": 1.9,
}

# 目标 -> (蛋白质, 碳水, 脂肪) 热量占比
MACRO_RATIOS: dict[str, tuple[float, float, float]] = {
    "ganho_massa": (0.30, 0.45, 0.25),
    "cutting": (0.40, 0.30, 0.30),
    "recomposicao": (0.35, 0.40, 0.25),
}
DEFAULT_MACRO_RATIOS = (0.30, 0.40, 0.30)

WEEKLY_CHANGE_KG = 0.5
KCAL_PER_KG = 7700
DAILY_ADJUSTMENT = WEEKLY_CHANGE_KG * KCAL_PER_KG / 7  # 550 kcal


def js_round(value: float) -> int:
    """四舍五入，.5 向上取整（含负数：-2.5 -> -2）"""
    return math.floor(value + 0.5)


def _plain(value: float) -> float | int:
    """整数值按 int 输出"""
    return int(value) if float(value).is_integer() else value


def calculate_tmb(age: float, weight: float, height: float, gender: str, activity_level: str) -> dict[str, Any]:
    """基础代谢与每日总消耗（Harris-Benedict）"""
    if gender == "masculino":
        tmb = 88.362 + (13.397 * weight) + (4.799 * height) - (5.677 * age)
    else:
        tmb = 447.593 + (9.247 * weight) + (3.098 * height) - (4.330 * age)

    tdee = tmb * ACTIVITY_MULTIPLIERS.get(activity_level, 1.2)

    return {
        "tmb": js_round(tmb),
        "tdee": js_round(tdee),
        "activityLevel": activity_level,
        "recommendations": {
            "cutting": js_round(tdee * 0.8),
            "manutencao": js_round(tdee),
            "ganho": js_round(tdee * 1.2),
        },
    }


def _macro(calories: float, ratio: float, kcal_per_gram: int) -> dict[str, int]:
    return {
        "gramas": js_round(calories * ratio / kcal_per_gram),
        "calorias": js_round(calories * ratio),
        "percentual": js_round(ratio * 100),
    }


def calculate_macros(calories: float, objective: str, weight: float) -> dict[str, Any]:
    """宏量营养素分配"""
    protein, carb, fat = MACRO_RATIOS.get(objective, DEFAULT_MACRO_RATIOS)

    return {
        "calorias": _plain(calories),
        "proteina": _macro(calories, protein, 4),
        "carboidrato": _macro(calories, carb, 4),
        "gordura": _macro(calories, fat, 9),
        "proteinaPorKg": js_round(calories * protein / 4 / weight * 100) / 100,
    }


def calculate_calories(
    objective: str,
    current_calories: float,
    weight: float,
    target_weight: float | None = None,
) -> dict[str, Any]:
    """按目标调整每日热量（每周 0.5 kg）"""
    if objective == "cutting":
        adjustment = -DAILY_ADJUSTMENT
    elif objective == "ganho_massa":
        adjustment = DAILY_ADJUSTMENT
    else:
        adjustment = 0.0

    weeks_to_goal = abs(target_weight - weight) / WEEKLY_CHANGE_KG if target_weight else 0.0

    if adjustment < 0:
        direction = "déficit"
    elif adjustment > 0:
        direction = "superávit"
    else:
        direction = "manutenção"

    return {
        "caloriaAtual": _plain(current_calories),
        "caloriaMeta": js_round(current_calories + adjustment),
        "ajuste": js_round(adjustment),
        "objetivo": objective,
        "tempoEstimado": js_round(weeks_to_goal),
        "deficitOuSuperavit": direction,
    }


class CalculatorService:
    """计算并保存结果"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = CalculationRepository(db)

    async def _save(self, session_id: str, kind: str, inputs: dict[str, Any], results: dict[str, Any]) -> None:
        await self.repo.save(session_id, kind, inputs, results)
        await self.db.commit()
        logger.debug("计算结果已保存", session_id=session_id, calculation_type=kind)

    async def tmb(self, data: TmbRequest) -> dict[str, Any]:
        results = calculate_tmb(data.age, data.weight, data.height, data.gender, data.activity_level)
        inputs = {
            "age": _plain(data.age),
            "weight": _plain(data.weight),
            "height": _plain(data.height),
            "gender": data.gender,
            "activityLevel": data.activity_level,
        }
        await self._save(data.session_id, "tmb", inputs, results)
        return results

    async def macros(self, data: MacrosRequest) -> dict[str, Any]:
        results = calculate_macros(data.calories, data.objective, data.weight)
        inputs = {
            "calories": _plain(data.calories),
            "objective": data.objective,
            "weight": _plain(data.weight),
        }
        await self._save(data.session_id, "macros", inputs, results)
        return results

    async def calories(self, data: CaloriesRequest) -> dict[str, Any]:
        results = calculate_calories(data.objective, data.current_calories, data.weight, data.target_weight)
        inputs = {
            "objective": data.objective,
            "currentCalories": _plain(data.current_calories),
            "weight": _plain(data.weight),
            "targetWeight": _plain(data.target_weight) if data.target_weight is not None else None,
        }
        await self._save(data.session_id, "calories", inputs, results)
        return results

    async def list_for_session(self, session_id: str) -> list[UserCalculation]:
        return await self.repo.list_by_session(session_id)
