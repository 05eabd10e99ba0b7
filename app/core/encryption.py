"""At-rest encryption for Google refresh tokens.

``ENCRYPTION_KEY`` may hold several comma-separated Fernet keys; the first
encrypts, all of them decrypt, so keys can be rotated without a migration.
"""

from functools import lru_cache

from cryptography.fernet import Fernet, MultiFernet

from app.config import get_settings

KEY_HELP = (
    "ENCRYPTION_KEY environment variable is required. "
    "Generate with: python -c 'from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())'"
)


class TokenVault:
    def __init__(self, encryption_key: str):
        keys = [Fernet(k.strip().encode()) for k in encryption_key.split(",") if k.strip()]
        if not keys:
            raise RuntimeError(KEY_HELP)
        self._fernet = MultiFernet(keys)

    def encrypt(self, token: str) -> bytes:
        return self._fernet.encrypt(token.encode("utf-8"))

    def decrypt(self, ciphertext: bytes) -> str:
        """Raises ``cryptography.fernet.InvalidToken`` for data from an unknown key."""
        return self._fernet.decrypt(ciphertext).decode("utf-8")


@lru_cache(maxsize=1)
def get_vault() -> TokenVault:
    return TokenVault(get_settings().encryption_key)
