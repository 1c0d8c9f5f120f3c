"""Application interfaces (ports). Infrastructure provides the implementations."""

from app.application.interfaces.repositories import IUserStore

__all__ = ["IUserStore"]
