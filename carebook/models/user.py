from dataclasses import dataclass, field
from datetime import datetime

from ..core.security import UserRole

@dataclass
class User:
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    password_hash: str
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
