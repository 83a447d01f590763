"""Mock auth verifier for local development and tests."""

from nexus.adapters.auth.base import AuthVerificationError, TokenVerifier
from nexus.schemas.auth import AuthPrincipal


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic test tokens only.

    Expected token format:
    - ``test:<open_id>``
    - ``test:<open_id>:<display name>``
    """

    def verify_token(self, token: str) -> AuthPrincipal:
        parts = token.split(":")
        if len(parts) not in (2, 3) or parts[0] != "test":
            raise AuthVerificationError("Invalid bearer token")

        open_id = parts[1].strip()
        name = parts[2].strip() if len(parts) == 3 else None

        if not open_id:
            raise AuthVerificationError("Bearer token missing user identity")

        return AuthPrincipal(open_id=open_id, name=name or None, login_method="mock")


__all__ = ["MockTokenVerifier"]
