from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import StaffMember


class StaffRepository(Protocol):
    """Read-only staff directory."""

    def get_by_id(self, staff_id: int) -> Optional[StaffMember]:
        raise NotImplementedError

    def list_active(self) -> Sequence[StaffMember]:
        raise NotImplementedError
