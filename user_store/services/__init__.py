from user_store.services.user_service import UserService

__all__ = ["UserService"]
