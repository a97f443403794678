"""
Freshdesk SLA Sync - Directory Schemas

Contacts (requesters) and agents as returned by the Freshdesk API
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

NO_NAME = "(No Name)"


class Contact(BaseModel):
    """Requester record from /api/v2/contacts"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    email: Optional[str] = None
    name: Optional[str] = None

    def display_name(self) -> str:
        if self.email is not None:
            return self.email
        if self.name is not None:
            return self.name
        return "-"


class AgentContact(BaseModel):
    """Contact block embedded in an agent record"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None


class Agent(BaseModel):
    """Agent record from /api/v2/agents"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    contact: Optional[AgentContact] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None

    def display_name(self) -> str:
        """First non-empty of the name fields, falling back to e-mail"""
        contact = self.contact or AgentContact()
        candidates = (
            contact.full_name,
            self.full_name,
            contact.first_name,
            self.first_name,
            self.email,
            contact.email,
        )
        for candidate in candidates:
            if candidate:
                return candidate
        return NO_NAME
