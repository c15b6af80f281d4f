"""
Department / head-of-department schemas.
"""

from typing import Optional

from hallbook.schemas.base import BaseSchema


class HodCheckResponse(BaseSchema):
    ok: bool
    message: Optional[str] = None


class HodAssignRequest(BaseSchema):
    profile_id: str
