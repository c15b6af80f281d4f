"""
Chatbot value types.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from hallbook.models.enums import UserRole


class Intent(str, enum.Enum):
    AVAILABILITY = "availability"
    MAINTENANCE = "maintenance"
    MY_BOOKINGS = "my_bookings"
    HOD_PENDING_BOOKINGS = "hod_pending_bookings"
    BOOKING = "booking"
    STATUS = "status"
    UNKNOWN = "unknown"


@dataclass
class ChatContext:
    """A chatbot message together with who sent it and when."""
    message: str
    profile_id: str
    roles: List[UserRole] = field(default_factory=list)
    now: Optional[datetime] = None

    def has_role(self, role: UserRole) -> bool:
        return role in self.roles


@dataclass
class ChatReply:
    reply: str
    intent: Intent = Intent.UNKNOWN
    hall_id: Optional[str] = None
    equipment_id: Optional[str] = None
    component_id: Optional[str] = None

    def to_dict(self):
        return {"reply": self.reply}
