import logging

from sqlalchemy.orm import Session

from storefront.errors import Forbidden, NotFound
from storefront.models.user import User
from storefront.rbac import Permission, has_permission
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user_schema import UserUpdate, user_to_dict
from storefront.services.auth_service import hash_password
from storefront.services.token_service import Identity

log = logging.getLogger("storefront.users")


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository(db)

    def _check_access(self, identity: Identity, user_id: int, any_perm: Permission, self_perm: Permission):
        if has_permission(identity.role, any_perm):
            return
        if identity.user_id == user_id and has_permission(identity.role, self_perm):
            return
        log.warning("User %s denied access to user %s", identity.user_id, user_id)
        raise Forbidden()

    def list(self, skip: int, limit: int):
        return self.repo.list(skip=skip, limit=limit)

    def get(self, identity: Identity, user_id: int) -> User:
        self._check_access(identity, user_id, Permission.USERS_READ, Permission.USERS_READ_SELF)
        u = self.repo.get(user_id)
        if not u:
            raise NotFound("User not found")
        return u

    def update(self, identity: Identity, user_id: int, payload: UserUpdate) -> User:
        self._check_access(identity, user_id, Permission.USERS_WRITE, Permission.USERS_WRITE_SELF)
        u = self.repo.get(user_id)
        if not u:
            raise NotFound("User not found")

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        fields = {}
        if "name" in changes:
            fields["name"] = changes["name"]
        if "email" in changes:
            fields["email"] = changes["email"].lower()
        if "password" in changes:
            fields["password_hash"] = hash_password(changes["password"])
        if "role" in changes:
            if not has_permission(identity.role, Permission.USERS_WRITE):
                raise Forbidden("Only administrators can change roles")
            fields["role"] = changes["role"].value

        self.repo.update(u, fields)
        self.db.commit()
        return u

    def delete(self, identity: Identity, user_id: int) -> dict:
        self._check_access(identity, user_id, Permission.USERS_WRITE, Permission.USERS_WRITE_SELF)
        u = self.repo.get(user_id)
        if not u:
            raise NotFound("User not found")
        snapshot = user_to_dict(u)
        self.repo.delete(u)
        self.db.commit()
        log.info("Deleted user id=%s", user_id)
        return snapshot
