"""User entity"""

from .validation import require_text

# Roles offered by frontends; the core accepts any non-empty role
KNOWN_ROLES = ("Owner", "Developer", "Maintainer", "Reporter")


class User:
    """A tracker user, identified by name"""

    def __init__(self, name: str, role: str):
        self._name = require_text(name, "user name")
        self._role = require_text(role, "role")

    @property
    def name(self) -> str:
        return self._name

    @property
    def role(self) -> str:
        return self._role

    def set_role(self, role: str) -> None:
        self._role = require_text(role, "role")

    def copy(self) -> "User":
        return User(self._name, self._role)

    def __eq__(self, other):
        if not isinstance(other, User):
            return NotImplemented
        return self._name == other._name

    def __hash__(self):
        return hash(self._name)

    def __repr__(self):
        return f"<User(name='{self._name}', role='{self._role}')>"

    def to_dict(self):
        return {"name": self._name, "role": self._role}
