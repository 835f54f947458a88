"""Identity providers for tagging telemetry with the installing user.

Obtaining a token from an identity provider is left to external tooling;
the installer only consumes an already issued OIDC ID token.
"""

import logging
from typing_extensions import override

import jwt

from telemetry_settings.exceptions import IdentityError

logger = logging.getLogger(__name__)

IDENTITY_CLAIMS = ("preferred_username", "email", "sub")


class IdentityProvider:
    """Base class for identity providers."""

    def get_user_id(self) -> str:
        """Get the user identifier.

        Returns:
            str: User identifier

        Raises:
            IdentityError: If the identifier cannot be retrieved
        """
        raise NotImplementedError


def derive_user_id(id_token: str) -> str:
    """Read the user identifier from an ID token.

    The signature is not verified; the token only labels telemetry.
    """
    try:
        claims = jwt.decode(id_token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise IdentityError(f"ID token is not a valid JWT: {e}") from e

    for claim in IDENTITY_CLAIMS:
        value = claims.get(claim)
        if isinstance(value, str) and value:
            return value
    raise IdentityError(
        f"ID token carries none of the claims: {', '.join(IDENTITY_CLAIMS)}"
    )


class IdTokenIdentityProvider(IdentityProvider):
    """Identity provider backed by an OIDC ID token."""

    id_token: str

    def __init__(self, id_token: str):
        """
        Args:
            id_token: Encoded ID token issued to the user.
        """
        if not id_token:
            raise IdentityError("ID token must not be empty")
        self.id_token = id_token

    @override
    def get_user_id(self) -> str:
        user_id = derive_user_id(self.id_token)
        logger.info("Resolved user identity '%s' from ID token", user_id)
        return user_id
