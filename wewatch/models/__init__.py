"""SQLAlchemy models package."""

from wewatch.models.user import User
from wewatch.models.profile import Profile
from wewatch.models.movie import Movie, MovieStatus

__all__ = [
    "User",
    "Profile",
    "Movie",
    "MovieStatus",
]
