"""Application DTOs (inputs to use cases; no ORM types)."""

from app.application.dtos.user import UserData

__all__ = ["UserData"]
