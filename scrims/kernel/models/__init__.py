"""
Kernel Data Models

SQLAlchemy models for the identity and team services.
"""

from scrims.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from scrims.kernel.models.user import User
from scrims.kernel.models.team import Team

__all__ = [
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    "User",
    "Team",
]
