from .credential_store import (
    PERMISSION_CLAIM,
    SqlAlchemyCredentialStore,
    hash_password,
    verify_password,
)
from .seed import seed_identity, seed_roles

__all__ = [
    "PERMISSION_CLAIM",
    "SqlAlchemyCredentialStore",
    "hash_password",
    "seed_identity",
    "seed_roles",
    "verify_password",
]
