from user_store.models.connection import ConnectionDescriptor
from user_store.models.user import User, UserCreateRequest, UserUpdateRequest

__all__ = [
    "ConnectionDescriptor",
    "User",
    "UserCreateRequest",
    "UserUpdateRequest",
]
