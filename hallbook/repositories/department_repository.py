"""
Department and profile repositories.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from hallbook.models.department import Department, Profile, UserRoleAssignment
from hallbook.models.enums import UserRole
from hallbook.repositories.base_repository import BaseRepository


class DepartmentRepository(BaseRepository[Department]):

    def __init__(self, db: Session):
        super().__init__(Department, db)

    def find_by_name(self, name: str) -> Optional[Department]:
        return self.db.execute(
            select(Department).where(Department.name == name)
        ).scalar_one_or_none()

    def current_hod_id(self, department_name: str) -> Optional[str]:
        department = self.find_by_name(department_name)
        return department.hod_id if department else None

    def assign_hod_if_vacant(self, department_id: str, profile_id: str) -> bool:
        """Compare-and-set: assign only while `hod_id` is still NULL."""
        changed = self.conditional_update(
            {"id": department_id, "hod_id": None},
            {"hod_id": profile_id},
        )
        return changed == 1


class ProfileRepository(BaseRepository[Profile]):

    def __init__(self, db: Session):
        super().__init__(Profile, db)

    def find_with_roles(self, profile_id: str) -> Optional[Profile]:
        return self.db.execute(
            select(Profile)
            .options(selectinload(Profile.role_assignments))
            .where(Profile.id == profile_id)
        ).scalar_one_or_none()

    def roles_for(self, profile_id: str) -> List[UserRole]:
        return list(self.db.execute(
            select(UserRoleAssignment.role).where(UserRoleAssignment.profile_id == profile_id)
        ).scalars())

    def grant_role(self, profile_id: str, role: UserRole) -> None:
        if role in self.roles_for(profile_id):
            return
        self.db.add(UserRoleAssignment(profile_id=profile_id, role=role))
        self.db.flush()

    def find_hod_for_department(self, department_id: str) -> Optional[Profile]:
        return self.db.execute(
            select(Profile)
            .join(Department, Department.hod_id == Profile.id)
            .where(Department.id == department_id)
        ).scalar_one_or_none()
