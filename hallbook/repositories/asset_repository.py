"""
Repositories for hall equipment and fixed components.

Every condition/status change writes a log row next to the asset update.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from hallbook.models.enums import (
    ComponentStatus,
    ComponentType,
    EquipmentCondition,
    EquipmentType,
)
from hallbook.models.hall import (
    ComponentMaintenanceLog,
    Equipment,
    EquipmentLog,
    HallComponent,
)
from hallbook.repositories.base_repository import BaseRepository
from hallbook.utils.datetime_utils import utcnow


class EquipmentRepository(BaseRepository[Equipment]):

    def __init__(self, db: Session):
        super().__init__(Equipment, db)

    def list_for_hall(self, hall_id: str) -> List[Equipment]:
        return list(self.db.execute(
            select(Equipment).where(Equipment.hall_id == hall_id).order_by(Equipment.name)
        ).scalars())

    def find_first_of_type(self, hall_id: str, equipment_type: EquipmentType) -> Optional[Equipment]:
        return self.db.execute(
            select(Equipment)
            .where(Equipment.hall_id == hall_id, Equipment.type == equipment_type)
            .order_by(Equipment.name)
            .limit(1)
        ).scalar_one_or_none()

    def change_condition(
        self,
        equipment: Equipment,
        condition: EquipmentCondition,
        updated_by: Optional[str],
        action: str = "condition_update",
        notes: Optional[str] = None,
    ) -> EquipmentLog:
        log = EquipmentLog(
            equipment_id=equipment.id,
            action=action,
            condition_before=equipment.condition,
            condition_after=condition,
            notes=notes,
            updated_by=updated_by,
        )
        equipment.condition = condition
        equipment.last_updated_by = updated_by
        equipment.last_updated_at = utcnow()
        self.db.add(log)
        self.db.flush()
        return log


class ComponentRepository(BaseRepository[HallComponent]):

    def __init__(self, db: Session):
        super().__init__(HallComponent, db)

    def list_for_hall(self, hall_id: str) -> List[HallComponent]:
        return list(self.db.execute(
            select(HallComponent).where(HallComponent.hall_id == hall_id).order_by(HallComponent.name)
        ).scalars())

    def find_first_of_type(self, hall_id: str, component_type: ComponentType) -> Optional[HallComponent]:
        return self.db.execute(
            select(HallComponent)
            .where(HallComponent.hall_id == hall_id, HallComponent.type == component_type)
            .order_by(HallComponent.name)
            .limit(1)
        ).scalar_one_or_none()

    def change_status(
        self,
        component: HallComponent,
        status: ComponentStatus,
        performed_by: Optional[str],
        action: str = "status_update",
        notes: Optional[str] = None,
    ) -> ComponentMaintenanceLog:
        log = ComponentMaintenanceLog(
            component_id=component.id,
            action=action,
            status_before=component.status,
            status_after=status,
            notes=notes,
            performed_by=performed_by,
        )
        component.status = status
        if status == ComponentStatus.OPERATIONAL:
            component.last_maintenance = utcnow()
        self.db.add(log)
        self.db.flush()
        return log
