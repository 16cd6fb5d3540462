from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

class SettingsSchema(BaseModel):
    weight_unit: Literal["kg", "lb"] = "kg"
    default_target_count: int = Field(12, ge=1)
    default_sets: int = Field(3, ge=1)
    default_reps: int = Field(10, ge=0)
    device_id: Optional[str] = None
    log_level: str = "INFO"
    language: str = "en"

def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
