"""
Freshdesk SLA Sync - SLA Policy Schemas
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SLATarget(BaseModel):
    """Per-priority targets of a policy, in seconds"""
    model_config = ConfigDict(extra="ignore")

    respond_within: Optional[int] = None
    resolve_within: Optional[int] = None


class SLAPolicy(BaseModel):
    """SLA policy from /api/v2/sla_policies"""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: str = ""
    description: Optional[str] = None
    is_default: bool = False
    sla_target: dict[str, SLATarget] = Field(default_factory=dict)
