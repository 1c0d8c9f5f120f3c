"""Application layer: interfaces and DTOs.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (source store, cached store).
"""

from app.application.dtos import UserData
from app.application.interfaces import IUserStore

__all__ = ["IUserStore", "UserData"]
