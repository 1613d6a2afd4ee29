from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class Role(IntEnum):
    """Staff hierarchy; a higher value holds every permission of the lower ones."""

    CLIENT = 1
    EMPLOYEE = 2
    MANAGER = 3
    ADMIN = 4
    CEO = 5

    @property
    def label(self) -> str:
        return "CEO" if self is Role.CEO else self.name.capitalize()

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        v = (value or "").strip().upper()
        try:
            return cls[v]
        except KeyError:
            raise ValueError(f"Unknown role: {value!r}") from None


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: Role = Role.CLIENT

    def has(self, minimum: Role) -> bool:
        return self.role >= minimum

    @property
    def is_elevated(self) -> bool:
        # may act on any user's orders
        return self.has(Role.MANAGER)
