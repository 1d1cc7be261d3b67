"""Authentication helpers and FastAPI security dependency.

This module provides utilities to decode JWT tokens and a FastAPI
dependency `get_current_account` that validates the bearer token and
returns the corresponding `Account` loaded in the request's own
session, so settings handlers mutate a fresh copy of the aggregate.

Token verification raises HTTPExceptions on failure so it can be used
directly inside route dependencies.
"""

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlmodel import Session
from .config import settings
from .database import get_session
from . import models, repositories

bearer_scheme = HTTPBearer()


def decode_token(token: str):
    """Decode and verify a JWT token.

    Returns the decoded payload on success or raises an HTTPException
    with status 401 on failure.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail='token expired')
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail='invalid token')


def get_current_account(
    credentials: HTTPAuthorizationCredentials = Security(bearer_scheme),
    db: Session = Depends(get_session),
) -> models.Account:
    """FastAPI dependency that returns the authenticated account.

    The function extracts the bearer token from the request, decodes it
    and looks the account up by id. It raises an HTTPException(401) for
    any authentication issue.
    """
    payload = decode_token(credentials.credentials)
    account_id = payload.get('account_id')
    if not account_id:
        raise HTTPException(status_code=401, detail='invalid token payload')
    account = repositories.AccountRepository(db).get(account_id)
    if not account:
        raise HTTPException(status_code=401, detail='account not found')
    return account
