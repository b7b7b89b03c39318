"""计算器公式测试"""

import pytest

from app.services.calculators import (
    calculate_calories,
    calculate_macros,
    calculate_tmb,
    js_round,
)


class TestJsRound:
    @pytest.mark.parametrize(
        "value, expected",
        [(2.5, 3), (2.4, 2), (-2.5, -2), (-2.6, -3), (0.5, 1)],
    )
    def test_half_rounds_up(self, value, expected):
        assert js_round(value) == expected


class TestTmb:
    def test_male_moderate(self):
        result = calculate_tmb(30, 80, 180, "masculino", "moderado")
        assert result == {
            "tmb": 1854,
            "tdee": 2873,
            "activityLevel": "moderado",
            "recommendations": {"cutting": 2299, "manutencao": 2873, "ganho": 3448},
        }

    def test_other_gender_uses_female_formula(self):
        result = calculate_tmb(25, 60, 165, "feminino", "sedentario")
        assert result["tmb"] == 1405
        assert result["tdee"] == 1686

    def test_unknown_activity_defaults_to_sedentary(self):
        known = calculate_tmb(25, 60, 165, "feminino", "sedentario")
        unknown = calculate_tmb(25, 60, 165, "feminino", "astronauta")
        assert unknown["tdee"] == known["tdee"]


class TestMacros:
    def test_cutting_split(self):
        result = calculate_macros(2000, "cutting", 80)
        assert result["calorias"] == 2000
        assert result["proteina"] == {"gramas": 200, "calorias": 800, "percentual": 40}
        assert result["carboidrato"] == {"gramas": 150, "calorias": 600, "percentual": 30}
        assert result["gordura"] == {"gramas": 67, "calorias": 600, "percentual": 30}
        assert result["proteinaPorKg"] == 2.5

    def test_unknown_objective_uses_default_split(self):
        result = calculate_macros(2000, "outro", 80)
        assert result["proteina"]["percentual"] == 30
        assert result["carboidrato"]["percentual"] == 40
        assert result["gordura"]["percentual"] == 30


class TestCalories:
    def test_cutting_deficit(self):
        result = calculate_calories("cutting", 2500, 80, 70)
        assert result == {
            "caloriaAtual": 2500,
            "caloriaMeta": 1950,
            "ajuste": -550,
            "objetivo": "cutting",
            "tempoEstimado": 20,
            "deficitOuSuperavit": "déficit",
        }

    def test_gain_surplus(self):
        result = calculate_calories("ganho_massa", 2500, 70, 75)
        assert result["caloriaMeta"] == 3050
        assert result["deficitOuSuperavit"] == "superávit"
        assert result["tempoEstimado"] == 10

    def test_maintenance_without_target(self):
        result = calculate_calories("manutencao", 2500, 70)
        assert result["ajuste"] == 0
        assert result["tempoEstimado"] == 0
        assert result["deficitOuSuperavit"] == "manutenção"
