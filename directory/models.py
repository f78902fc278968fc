"""Domain models for the employee directory."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Mapping


@dataclass(frozen=True)
class User:
    """Represents an employee stored in the ``users`` table."""

    id: int
    name: str
    email: str
    city: str
    country: str
    created_at: datetime

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "city": self.city,
            "country": self.country,
            "created_at": self.created_at.isoformat(),
        }

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "User":
        """Create a :class:`User` from a decoded JSON object."""
        required_fields = {"id", "name", "email", "city", "country", "created_at"}
        missing = required_fields - data.keys()
        if missing:
            raise ValueError(f"Missing required user fields: {', '.join(sorted(missing))}")

        raw_created = data["created_at"]
        if isinstance(raw_created, datetime):
            created_at = raw_created
        else:
            text = str(raw_created)
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            created_at = datetime.fromisoformat(text)

        return User(
            id=int(data["id"]),  # type: ignore[arg-type]
            name=str(data["name"]),
            email=str(data["email"]),
            city=str(data["city"]),
            country=str(data["country"]),
            created_at=created_at,
        )


__all__ = ["User"]
