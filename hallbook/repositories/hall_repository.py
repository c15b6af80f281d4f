"""
Seminar hall repository.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from hallbook.core.exceptions import ConflictError
from hallbook.models.enums import HallStatus
from hallbook.models.hall import HallTechStaff, SeminarHall
from hallbook.repositories.base_repository import BaseRepository


class HallRepository(BaseRepository[SeminarHall]):

    def __init__(self, db: Session):
        super().__init__(SeminarHall, db)

    def list_ordered(self) -> List[SeminarHall]:
        """All halls with their department, ordered by name."""
        return list(self.db.execute(
            select(SeminarHall)
            .options(joinedload(SeminarHall.department))
            .order_by(SeminarHall.name)
        ).scalars().unique())

    def list_for_department(self, department_id: str) -> List[SeminarHall]:
        return list(self.db.execute(
            select(SeminarHall)
            .where(SeminarHall.department_id == department_id)
            .order_by(SeminarHall.name)
        ).scalars())

    def list_for_tech_staff(self, profile_id: str) -> List[SeminarHall]:
        return list(self.db.execute(
            select(SeminarHall)
            .join(HallTechStaff, HallTechStaff.hall_id == SeminarHall.id)
            .where(HallTechStaff.tech_staff_id == profile_id)
            .order_by(SeminarHall.name)
        ).scalars())

    def find_detail(self, hall_id: str) -> Optional[SeminarHall]:
        return self.db.execute(
            select(SeminarHall)
            .options(
                joinedload(SeminarHall.department),
                selectinload(SeminarHall.equipment),
                selectinload(SeminarHall.components),
                selectinload(SeminarHall.tech_staff_assignments),
            )
            .where(SeminarHall.id == hall_id)
        ).scalar_one_or_none()

    def update_status(self, hall_id: str, status: HallStatus) -> SeminarHall:
        return self.update(hall_id, {"status": status})

    def is_tech_staff_of(self, hall_id: str, profile_id: str) -> bool:
        return self.db.execute(
            select(HallTechStaff.id).where(
                HallTechStaff.hall_id == hall_id,
                HallTechStaff.tech_staff_id == profile_id,
            )
        ).first() is not None

    def assign_tech_staff(self, hall_id: str, profile_id: str) -> HallTechStaff:
        if self.is_tech_staff_of(hall_id, profile_id):
            raise ConflictError("Tech staff is already assigned to this hall")
        assignment = HallTechStaff(hall_id=hall_id, tech_staff_id=profile_id)
        self.db.add(assignment)
        self.db.flush()
        return assignment
