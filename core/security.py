import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from firebase_admin import auth

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login") # tokenUrl is not directly used, but required by FastAPI


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str = Depends(oauth2_scheme)) -> dict:
    """
    Dependency that verifies a Firebase ID token and returns its claims.
    Packing lists are stored per 'uid' claim, so a token without one is rejected.
    """
    try:
        claims = auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        raise _unauthorized("Token has expired")
    except auth.InvalidIdTokenError:
        raise _unauthorized("Invalid token")
    except ValueError as e:
        # Raised when the Firebase app was never initialized.
        logger.error("Cannot verify ID tokens: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication is not available.",
        )
    except Exception as e:
        raise _unauthorized(f"Could not validate credentials: {e}")

    if not claims.get("uid"):
        raise _unauthorized("Token has no user id")
    return claims
