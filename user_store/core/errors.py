"""
Error taxonomy for the user store.

Driver exceptions never cross the DAO / bootstrapper / connection boundary;
they are translated into one of these and chained as ``__cause__``.
Not-found is not an error: lookups return None and delete returns False.
"""


class UserStoreError(Exception):
    """Base class for every error raised by user_store."""


class StoreConnectionError(UserStoreError):
    """The cluster session cannot be established or is not available."""


class SchemaError(UserStoreError):
    """A schema bootstrap step failed or the keyspace name is unusable."""


class InvalidArgumentError(UserStoreError):
    """Caller-supplied identifier or update payload is malformed."""


class QueryError(UserStoreError):
    """A well-formed statement could not be executed by the store."""


class QueryTimeoutError(QueryError):
    """The store did not answer within the request timeout."""
