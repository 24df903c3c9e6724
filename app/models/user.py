from sqlalchemy import Column, String
from .base import BaseModel


ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    # Asset reference in the "profile" slot; the shared placeholder when no upload
    profile = Column(String(255), nullable=False, default="default.png", server_default="default.png")
    role = Column(String(20), nullable=False, default=ROLE_USER, server_default=ROLE_USER)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
