"""Bearer token guard for protected routes."""

from fastapi import Depends, Request

from ..auth import AuthError, MissingTokenError, TokenVerifier, VerifiedIdentity
from .._utils import logger
from .dependencies import get_metrics, get_token_verifier
from .exceptions import UnauthorizedError
from .metrics import PrometheusMetrics


def extract_bearer_token(request: Request) -> str:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise MissingTokenError()
    return token.strip()


async def require_identity(
    request: Request,
    verifier: TokenVerifier = Depends(get_token_verifier),
    metrics: PrometheusMetrics = Depends(get_metrics),
) -> VerifiedIdentity:
    """Verify the request's bearer token and attach the identity to ``request.state.user``.

    Any verification failure is a 401; nothing is retried.
    """
    try:
        token = extract_bearer_token(request)
        identity = await verifier.verify(token)
    except AuthError as e:
        logger.warning(f"Rejected request to {request.url.path}: {e.reason}")
        metrics.record_authentication(success=False)
        raise UnauthorizedError(e.reason)

    metrics.record_authentication(success=True)
    request.state.user = identity
    return identity
