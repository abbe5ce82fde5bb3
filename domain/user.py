"""
Domain: team members (users).

Users are read-only in this core. Leads refer to them through `Lead.assigned_to`,
a lookup-only relation: removing a user never touches the leads that mention it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    SALES = "sales"
    TECHNICIAN = "technician"


@dataclass(frozen=True, slots=True)
class User:
    """Team member who can own leads or run site surveys."""

    id: str
    name: str
    email: str
    role: UserRole
    phone: str
