# fitflow/bmi.py
from typing import Dict, Optional


def calculate_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> float:
    if not weight_kg or not height_cm:
        return 0.0
    height_m = height_cm / 100.0
    return round(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: float) -> Dict[str, str]:
    if bmi < 18.5:
        return {
            "category": "Underweight",
            "color": "#3498db",
            "description": "Below normal weight range",
        }
    if bmi < 25:
        return {
            "category": "Normal",
            "color": "#27ae60",
            "description": "Healthy weight range",
        }
    if bmi < 30:
        return {
            "category": "Overweight",
            "color": "#f39c12",
            "description": "Above normal weight range",
        }
    return {
        "category": "Obese",
        "color": "#e74c3c",
        "description": "Significantly above normal weight range",
    }
