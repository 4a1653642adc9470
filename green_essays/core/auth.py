import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from green_essays.core.config import settings
from green_essays.core.security import verify_token
from green_essays.domains.essays.entities import ActingUser

logger = logging.getLogger(__name__)

# Токены выдает внешний провайдер, здесь они только проверяются
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def acting_user_from_claims(payload: Optional[dict]) -> ActingUser:
    """Построение контекста пользователя из claims токена"""
    if not payload:
        return ActingUser.anonymous()

    identity = payload.get("email") or payload.get("sub")
    role = payload.get("role")
    return ActingUser(
        is_privileged=role in settings.privileged_roles,
        identity=identity,
    )


async def get_acting_user(token: Optional[str] = Depends(oauth2_scheme)) -> ActingUser:
    """Зависимость для получения текущего пользователя (или анонимного читателя)"""
    if not token:
        return ActingUser.anonymous()

    payload = verify_token(token)
    if payload is None:
        logger.warning("Rejected bearer token, continuing as anonymous viewer")
    return acting_user_from_claims(payload)
