"""
Maintenance request repository.
"""

from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from hallbook.core.exceptions import InvalidStateTransitionError
from hallbook.models.enums import MaintenanceRequestStatus
from hallbook.models.hall import SeminarHall
from hallbook.models.maintenance import ALLOWED_MAINTENANCE_TRANSITIONS, MaintenanceRequest
from hallbook.repositories.base_repository import BaseRepository


class MaintenanceRepository(BaseRepository[MaintenanceRequest]):

    def __init__(self, db: Session):
        super().__init__(MaintenanceRequest, db)

    def _base(self):
        return select(MaintenanceRequest).options(
            joinedload(MaintenanceRequest.hall),
            joinedload(MaintenanceRequest.equipment),
            joinedload(MaintenanceRequest.component),
        )

    def pending_for_department(self, department_id: str) -> List[MaintenanceRequest]:
        return list(self.db.execute(
            self._base()
            .join(SeminarHall, SeminarHall.id == MaintenanceRequest.hall_id)
            .where(
                SeminarHall.department_id == department_id,
                MaintenanceRequest.status == MaintenanceRequestStatus.PENDING,
            )
            .order_by(MaintenanceRequest.created_at.desc())
        ).scalars().unique())

    def for_hall(self, hall_id: str) -> List[MaintenanceRequest]:
        return list(self.db.execute(
            self._base()
            .where(MaintenanceRequest.hall_id == hall_id)
            .order_by(MaintenanceRequest.created_at.desc())
        ).scalars().unique())

    def for_tech_staff(
        self,
        profile_id: str,
        status: Optional[MaintenanceRequestStatus] = None,
    ) -> List[MaintenanceRequest]:
        stmt = self._base().where(MaintenanceRequest.tech_staff_id == profile_id)
        if status is not None:
            stmt = stmt.where(MaintenanceRequest.status == status)
        return list(self.db.execute(
            stmt.order_by(MaintenanceRequest.created_at.desc())
        ).scalars().unique())

    def transition_status(
        self,
        request_id: str,
        expected: MaintenanceRequestStatus,
        target: MaintenanceRequestStatus,
        **values: Any,
    ) -> bool:
        if target not in ALLOWED_MAINTENANCE_TRANSITIONS.get(expected, frozenset()):
            raise InvalidStateTransitionError("MaintenanceRequest", expected.value, target.value)
        values["status"] = target
        return self.conditional_update({"id": request_id, "status": expected}, values) == 1
