from sqlalchemy.orm import Session

from coursehub.models.user import Role, User


class UserDirectory:
    """Profile and role records keyed by the identity provider's uid."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, uid: str) -> User | None:
        return self.db.get(User, uid)

    def create(
        self, uid: str, email: str, display_name: str | None = None, role: Role = Role.STUDENT
    ) -> User:
        user = User(uid=uid, email=email, display_name=display_name, role=role.value)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def set_role(self, user: User, role: Role) -> User:
        user.role = role.value
        self.db.commit()
        self.db.refresh(user)
        return user

    def display_name_for(self, uid: str, fallback: str) -> str:
        user = self.get(uid)
        if user is not None and user.display_name:
            return user.display_name
        return fallback
