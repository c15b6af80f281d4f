"""
Resolve halls and hall assets mentioned in a chatbot message.
"""

import re
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from hallbook.models.enums import ComponentType, EquipmentType
from hallbook.models.hall import Equipment, HallComponent, SeminarHall
from hallbook.repositories.asset_repository import ComponentRepository, EquipmentRepository
from hallbook.repositories.hall_repository import HallRepository

GENERIC_HALL_WORDS = frozenset({
    "hall", "halls", "seminar", "room", "rooms", "the", "a", "an", "of", "and",
})


def distinctive_tokens(hall_name: str) -> List[str]:
    return [
        token for token in re.split(r"\W+", hall_name.lower())
        if len(token) > 1 and token not in GENERIC_HALL_WORDS
    ]


def match_hall(message: str, halls: Iterable[SeminarHall]) -> Optional[SeminarHall]:
    """
    First hall whose full name occurs in the message, else the first hall
    with a distinctive name word in it. Halls are tried in the given order.
    """
    msg = message.lower()
    halls = list(halls)

    for hall in halls:
        if hall.name.lower() in msg:
            return hall

    for hall in halls:
        for token in distinctive_tokens(hall.name):
            if re.search(rf"\b{re.escape(token)}\b", msg):
                return hall
    return None


class EntityResolver:
    """Database lookups for the chatbot, at most one result each."""

    def __init__(self, db: Session):
        self.halls = HallRepository(db)
        self.equipment = EquipmentRepository(db)
        self.components = ComponentRepository(db)

    def resolve_hall(self, message: str) -> Optional[SeminarHall]:
        return match_hall(message, self.halls.list_ordered())

    def resolve_equipment(self, hall_id: str, equipment_type: Optional[EquipmentType]) -> Optional[Equipment]:
        if equipment_type is None:
            return None
        return self.equipment.find_first_of_type(hall_id, equipment_type)

    def resolve_component(self, hall_id: str, component_type: Optional[ComponentType]) -> Optional[HallComponent]:
        if component_type is None:
            return None
        return self.components.find_first_of_type(hall_id, component_type)
