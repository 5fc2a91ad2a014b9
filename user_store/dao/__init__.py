from user_store.dao.user_dao import UserDAO

__all__ = ["UserDAO"]
