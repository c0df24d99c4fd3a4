"""Pydantic schemas for tracked assets, alerts and maintenance history."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


def _new_id() -> str:
    return str(uuid.uuid4())


class ComponentType(str, Enum):
    """Wear-prone machine components tracked by the twin."""

    BALL_SCREW = "Ball Screw"
    LM_GUIDEWAY = "LM Guideway"
    TOOL_MAGAZINE = "Tool Magazine"
    SPINDLE_MOTOR = "Spindle Motor"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class AlertType(str, Enum):
    WEAR = "wear"
    STOCK = "stock"
    MAINTENANCE = "maintenance"


class MaintenanceType(str, Enum):
    INSPECTION = "inspection"
    REPAIR = "repair"
    REPLACEMENT = "replacement"


# --- Machines ---


class MachineCreate(BaseModel):
    """Payload for registering a machine."""

    name: str
    component_type: ComponentType
    initial_life: float = Field(ge=1, le=100)  # % of life at install
    operating_hours: float = Field(ge=0)
    load_factor: float = Field(ge=0, le=1)
    replacement_cost: float = Field(ge=0)  # INR


class MachineUpdate(BaseModel):
    """Administrative edit. Life fields are owned by the simulator."""

    name: Optional[str] = None
    component_type: Optional[ComponentType] = None
    operating_hours: Optional[float] = Field(default=None, ge=0)
    load_factor: Optional[float] = Field(default=None, ge=0, le=1)
    replacement_cost: Optional[float] = Field(default=None, ge=0)


class Machine(MachineCreate):
    """A machine as held by the store."""

    id: str = Field(default_factory=_new_id)
    remaining_life: float = Field(ge=0)
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _life_within_initial(self) -> "Machine":
        if self.remaining_life > self.initial_life:
            raise ValueError("remaining_life cannot exceed initial_life")
        return self


# --- Critical spares ---


class SpareCreate(BaseModel):
    """Payload for a critical spare (import row or direct creation)."""

    item_code: str
    item_description: str
    unit: str
    min_stock: int = Field(default=1, ge=0)
    reorder_level: int = Field(default=2, ge=0)
    quantity_in_hand: int = Field(default=0, ge=0)
    machine_type: str = "CNC"

    # Predictive maintenance fields
    operating_hours: float = Field(default=0, ge=0)
    load_factor: float = Field(default=1.0, ge=0)
    wear_percentage: float = Field(default=0.0, ge=0, le=100)
    expected_life_hours: float = Field(default=8760, gt=0)  # 1 year
    last_maintenance_date: Optional[datetime] = None
    predicted_replacement_date: Optional[datetime] = None
    replacement_cost_inr: float = Field(default=10000.0, ge=0)


class SpareUpdate(BaseModel):
    """Partial spare edit. The item code is immutable."""

    item_description: Optional[str] = None
    unit: Optional[str] = None
    min_stock: Optional[int] = Field(default=None, ge=0)
    reorder_level: Optional[int] = Field(default=None, ge=0)
    quantity_in_hand: Optional[int] = Field(default=None, ge=0)
    machine_type: Optional[str] = None
    operating_hours: Optional[float] = Field(default=None, ge=0)
    load_factor: Optional[float] = Field(default=None, ge=0)
    wear_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    expected_life_hours: Optional[float] = Field(default=None, gt=0)
    last_maintenance_date: Optional[datetime] = None
    predicted_replacement_date: Optional[datetime] = None
    replacement_cost_inr: Optional[float] = Field(default=None, ge=0)


class CriticalSpare(SpareCreate):
    """A spare as held by the store."""

    id: str = Field(default_factory=_new_id)
    created_at: datetime
    updated_at: datetime

    @property
    def remaining_life(self) -> float:
        """Remaining life in percent (100 - wear, clamped)."""
        return max(0.0, 100.0 - self.wear_percentage)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_in_hand < self.reorder_level


# --- Alerts ---


class AlertCreate(BaseModel):
    """Alert raised against exactly one machine or spare."""

    machine_id: Optional[str] = None
    spare_id: Optional[str] = None
    message: str
    severity: Severity
    alert_type: AlertType = AlertType.WEAR
    sent_via_whatsapp: bool = False

    @model_validator(mode="after")
    def _exactly_one_subject(self):
        if (self.machine_id is None) == (self.spare_id is None):
            raise ValueError("exactly one of machine_id or spare_id must be set")
        return self


class Alert(AlertCreate):
    id: str = Field(default_factory=_new_id)
    created_at: datetime


# --- Maintenance logs ---


class MaintenanceLogCreate(BaseModel):
    spare_id: str
    maintenance_type: MaintenanceType
    quantity_used: int = Field(default=1, ge=0)
    cost: Optional[float] = None
    notes: Optional[str] = None
    performed_by: Optional[str] = None


class MaintenanceLog(MaintenanceLogCreate):
    id: str = Field(default_factory=_new_id)
    created_at: datetime
