from typing import Optional

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """The signed-in user, taken from the bearer token and passed explicitly."""

    user_id: str
    student_id: Optional[str] = None
    email: Optional[str] = None
    full_name: str = ""
    role: str = "Student"
    token: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role.lower() in ("admin", "superadmin")
