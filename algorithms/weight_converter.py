class WeightConverter:
    """Utility for converting set weights between kg and lb."""

    KG_TO_LB = 2.20462

    @staticmethod
    def kg_to_lb(kg: float) -> float:
        return round(kg * WeightConverter.KG_TO_LB, 2)

    @staticmethod
    def lb_to_kg(lb: float) -> float:
        return round(lb / WeightConverter.KG_TO_LB, 2)

    @classmethod
    def to_unit(cls, kg: float, unit: str) -> float:
        """Express a stored kg value in the display ``unit``."""
        if unit == "kg":
            return kg
        if unit == "lb":
            return cls.kg_to_lb(kg)
        raise ValueError(f"unknown weight unit: {unit}")
