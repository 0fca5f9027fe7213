"""Service layer exports."""

from .auth_resolver import AuthResolver, Identity, PresentedCredentials, Role
from .credential_store import CredentialStore
from .delegated_tokens import DelegatedTokenService
from .reconciliation import Outcome, ReconcileError, ReconciliationEngine
from .token_cipher import TokenCipherService
from .token_codec import TokenCodec

__all__ = [
    "AuthResolver",
    "CredentialStore",
    "DelegatedTokenService",
    "Identity",
    "Outcome",
    "PresentedCredentials",
    "ReconcileError",
    "ReconciliationEngine",
    "Role",
    "TokenCipherService",
    "TokenCodec",
]
