from typing import Optional
from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    password_hash: str


class Tool(SQLModel, table=True):
    id: str = Field(primary_key=True)
    model: str = Field(index=True)    # T45 / T50 / T51
    type: str = Field(index=True)     # Punho / Haste / Bit ...
    quantity: int = Field(default=0)
    min_threshold: int = Field(default=0)
    # local wall-clock time, stored without tzinfo
    updated_at: NaiveDatetime = Field(default_factory=datetime.now, sa_type=DateTime)


class Withdrawal(SQLModel, table=True):
    id: str = Field(primary_key=True)
    date: NaiveDatetime = Field(index=True, sa_type=DateTime)

    tool_id: str = Field(foreign_key="tool.id", index=True)
    tool_name: str                    # snapshot "<type> <model>"
    quantity: int

    reason: str = Field(index=True)
    supervisor: str = ""
    operator: str = ""
    rig_tag: str = ""
    team: str = ""
