# leave_manager/users/models.py
from sqlalchemy import Column, String, CheckConstraint
from werkzeug.security import check_password_hash

from leave_manager.database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('employee','manager','hr','admin')", name="ck_users_role"),
    )

    id = Column("id", String(36), primary_key=True)
    username = Column("username", String(64), unique=True, nullable=False)
    name = Column("name", String(100), nullable=False)
    role = Column("role", String(20), nullable=False)
    password_hash = Column("passwordHash", String(255), nullable=False)

    def check_password(self, password: str) -> bool:
        # hashes werkzeug can't parse (e.g. bcrypt rows from older databases) never match
        try:
            return check_password_hash(self.password_hash, password)
        except ValueError:
            return False

    def to_public(self):
        # password_hash never leaves this module
        return {"id": self.id, "username": self.username, "name": self.name, "role": self.role}

    def __repr__(self):
        return f"<User id={self.id} username={self.username} role={self.role}>"
