"""User — the identity collaborator's view of a caller.

Users are managed elsewhere (registration, login, role management).  The
ordering core only resolves ids to names and roles.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    CLIENT = "client"
    RESTAURANT = "restaurant"
    DELIVERY = "delivery"
    SUPERVISOR = "supervisor"
    ADMIN = "admin"


@dataclass(frozen=True)
class User:
    id: int
    name: str
    username: str
    role: Role = Role.CLIENT
