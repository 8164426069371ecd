# --------------------------------------------------
# claims.py
# --------------------------------------------------
# Best-effort identity for logging.
#
# Reads a claim from the bearer token of a request.
# The identity is informational only (it ends up in
# the "User" log field), so every failure yields ""
# instead of an error:
#   - missing / empty Authorization header
#   - token that does not decode as a JWT
#   - claim not present
#
# Signatures are NOT verified here. Authorization
# decisions must never rely on these helpers.
# --------------------------------------------------

from typing import Any, Dict, Optional

import jwt
from starlette.requests import Request


BEARER_PREFIX = "Bearer "


def decode_claims(token: str) -> Optional[Dict[str, Any]]:
    """Decode the JWT payload without verification; None if it is not a JWT."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None


def extract_claim(authorization: Optional[str], claim_name: str) -> str:
    """
    Return the value of `claim_name` from an Authorization header value.

    Accepts "Bearer <token>" or a bare token. List-valued claims
    yield their first element.
    """
    token = authorization or ""
    if not token:
        return ""

    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]

    claims = decode_claims(token)
    if claims is None:
        return ""

    value = claims.get(claim_name)
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None:
        return ""

    return value if isinstance(value, str) else str(value)


def get_sub_in_token(request: Request) -> str:
    return extract_claim(request.headers.get("Authorization"), "sub")


def get_company_in_token(request: Request) -> str:
    return extract_claim(request.headers.get("Authorization"), "company")
