from voyage.models.user import User
from voyage.models.trip import Trip

__all__ = [
    "Trip",
    "User",
]
