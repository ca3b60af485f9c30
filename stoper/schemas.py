from typing import Annotated, Optional
from enum import Enum
from pydantic import BaseModel, Field, StringConstraints
from datetime import date, datetime

from stoper.constants import ToolModel, ToolType, Team, Reason

# SQLite INTEGER is a signed 64-bit value
MAX_STOCK = 2**63 - 1

# free-form labels end up unquoted in the CSV export: no ";" and no line breaks
Label = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=80, pattern=r"^[^;\r\n]+$"),
]


class UserCreate(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ToolRead(BaseModel):
    id: str
    model: ToolModel
    type: ToolType
    quantity: int
    min_threshold: int
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True, "from_attributes": True}

    @property
    def display_name(self) -> str:
        return f"{self.type.value} {self.model.value}"


class WithdrawalCreate(BaseModel):
    tool_id: str
    # no ge=1 here: the engine owns the INVALID_QUANTITY rule
    quantity: int
    reason: Reason
    supervisor: Label
    operator: Label
    rig_tag: Label
    team: Team

    # the date is stamped server-side; a client-sent "date" is rejected
    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "examples": [
                {
                    "tool_id": "t51-haste",
                    "quantity": 2,
                    "reason": "Desgaste",
                    "supervisor": "Emanuel",
                    "operator": "João",
                    "rig_tag": "PH14",
                    "team": "Turma A",
                },
            ]
        }
    }


class WithdrawalRead(BaseModel):
    id: str
    date: datetime
    tool_id: str
    tool_name: str
    quantity: int
    reason: str
    supervisor: str = ""
    operator: str = ""
    rig_tag: str = ""
    team: str = ""

    model_config = {"frozen": True, "from_attributes": True}


class WithdrawalResult(BaseModel):
    withdrawal: WithdrawalRead
    tool: ToolRead
    alert: Optional[str] = None


class ReversalResult(BaseModel):
    withdrawal_id: str
    tool: ToolRead


class StockUpdate(BaseModel):
    quantity: int = Field(..., le=MAX_STOCK, description="Contagem física; valores negativos viram 0")


class ThresholdUpdate(BaseModel):
    min_threshold: int = Field(..., le=MAX_STOCK, description="Nível mínimo; valores negativos viram 0")


class ToolUpdateResult(BaseModel):
    tool: ToolRead
    alert: Optional[str] = None


class Granularity(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class HistoryPeriod(str, Enum):
    all = "all"
    today = "today"
    week = "week"
    month = "month"


class ToolConsumption(BaseModel):
    tool_id: str
    name: str
    model: ToolModel
    type: ToolType
    total: int


class ReasonConsumption(BaseModel):
    reason: str
    total: int


class EvolutionPoint(BaseModel):
    period_start: date
    label: str
    total: int


class DashboardStats(BaseModel):
    total_tools: int
    low_stock_count: int
    withdrawals_today: int
    most_used_model: str
    low_stock: list[ToolRead]


class InsightsResponse(BaseModel):
    text: str


class CatalogResponse(BaseModel):
    models: list[str]
    types: list[str]
    teams: list[str]
    reasons: list[str]
    supervisors: list[str]
    rig_tags: list[str]
