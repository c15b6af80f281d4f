"""
Department and profile models.

A department owns seminar halls and has at most one head of department.
Profiles carry one or more role assignments.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hallbook.models.base import BaseModel, TimestampModel
from hallbook.models.enums import UserRole

if TYPE_CHECKING:
    from hallbook.models.hall import SeminarHall


class Department(TimestampModel):
    """Academic department. `hod_id` is unique so a profile heads one department."""

    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hod_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL", use_alter=True),
        nullable=True,
        unique=True,
        comment="Current head of department",
    )

    hod_profile: Mapped[Optional["Profile"]] = relationship(
        "Profile", foreign_keys=[hod_id], post_update=True
    )
    halls: Mapped[List["SeminarHall"]] = relationship(
        "SeminarHall", back_populates="department", order_by="SeminarHall.name"
    )
    members: Mapped[List["Profile"]] = relationship(
        "Profile", back_populates="department", foreign_keys="Profile.department_id"
    )


class Profile(TimestampModel):
    """Application user profile"""

    __tablename__ = "profiles"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    department_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True
    )

    department: Mapped[Optional[Department]] = relationship(
        Department, back_populates="members", foreign_keys=[department_id]
    )
    role_assignments: Mapped[List["UserRoleAssignment"]] = relationship(
        "UserRoleAssignment", back_populates="profile", cascade="all, delete-orphan"
    )

    @property
    def roles(self) -> List[UserRole]:
        return [assignment.role for assignment in self.role_assignments]

    def has_role(self, role: UserRole) -> bool:
        return role in self.roles


class UserRoleAssignment(BaseModel):
    """Role granted to a profile"""

    __tablename__ = "user_role_assignments"
    __table_args__ = (UniqueConstraint("profile_id", "role", name="uq_profile_role"),)

    profile_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False)

    profile: Mapped[Profile] = relationship(Profile, back_populates="role_assignments")
