"""
Entity and time-window extraction from free text.
"""

import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Dict, Optional, Tuple

from hallbook.models.enums import (
    ComponentType,
    EquipmentType,
    MaintenancePriority,
    MaintenanceRequestType,
)

DEFAULT_WINDOW = timedelta(hours=2)
TOMORROW_START = time(9, 0)

EQUIPMENT_KEYWORDS: Dict[str, EquipmentType] = {
    "projector": EquipmentType.PROJECTOR,
    "microphone": EquipmentType.MICROPHONE,
    "mic": EquipmentType.MICROPHONE,
    "speaker": EquipmentType.SPEAKER,
    "camera": EquipmentType.CAMERA,
    "laptop": EquipmentType.LAPTOP,
}

COMPONENT_KEYWORDS: Dict[str, ComponentType] = {
    "screen": ComponentType.SCREEN,
    "smartboard": ComponentType.SMARTBOARD,
    "ac": ComponentType.AC,
    "air conditioner": ComponentType.AC,
    "lighting": ComponentType.LIGHTING,
    "light": ComponentType.LIGHTING,
}


@dataclass
class ExtractedEntities:
    equipment_type: Optional[EquipmentType]
    component_type: Optional[ComponentType]
    request_type: MaintenanceRequestType
    priority: MaintenancePriority


def _mentions(msg: str, word: str) -> bool:
    # whole words only, so "ac" does not match "place"; a plural "s" is allowed
    return re.search(rf"\b{re.escape(word)}s?\b", msg) is not None


def _first_match(msg: str, keywords: Dict[str, object]):
    for word, value in keywords.items():
        if _mentions(msg, word):
            return value
    return None


def extract_entities(message: str) -> ExtractedEntities:
    msg = message.lower()

    if "install" in msg:
        request_type = MaintenanceRequestType.NEW_INSTALLATION
    elif "replace" in msg:
        request_type = MaintenanceRequestType.REPLACEMENT
    elif "inspect" in msg:
        request_type = MaintenanceRequestType.INSPECTION
    else:
        request_type = MaintenanceRequestType.REPAIR

    if "urgent" in msg or "immediately" in msg:
        priority = MaintenancePriority.CRITICAL
    elif "soon" in msg:
        priority = MaintenancePriority.HIGH
    else:
        priority = MaintenancePriority.MEDIUM

    return ExtractedEntities(
        equipment_type=_first_match(msg, EQUIPMENT_KEYWORDS),
        component_type=_first_match(msg, COMPONENT_KEYWORDS),
        request_type=request_type,
        priority=priority,
    )


def extract_time_window(message: str, now: datetime) -> Tuple[datetime, datetime]:
    """
    The window a question refers to.

    Defaults to the next two hours; "tomorrow" means tomorrow 09:00-11:00.
    """
    if "tomorrow" in message.lower():
        start = datetime.combine(now.date() + timedelta(days=1), TOMORROW_START)
        return start, start + DEFAULT_WINDOW
    return now, now + DEFAULT_WINDOW
