from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlmodel import Session, select

from stoper.config import Settings, get_settings
from stoper.db import get_session
from stoper.error import _auth_401
from stoper.models import User
from stoper.security import decode_token
from stoper.services.gateway import SqlGateway
from stoper.services.insights import InsightClient
from stoper.services.inventory import InventoryService

# auto_error=False so a missing token gets our error envelope
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def require_user(
    token: str | None = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> User:
    if not token:
        raise _auth_401("NOT_AUTHENTICATED", "Não autenticado ou sessão expirada, faça login novamente")

    try:
        username = decode_token(token)
    except (JWTError, ValueError):
        raise _auth_401("INVALID_TOKEN", "Token inválido ou expirado, faça login novamente")

    user = session.exec(select(User).where(User.username == username)).first()
    if not user:
        raise _auth_401("USER_NOT_FOUND", "Usuário não existe ou foi removido")

    return user


def get_inventory(session: Session = Depends(get_session)) -> InventoryService:
    return InventoryService(SqlGateway(session))


def get_insight_client(settings: Settings = Depends(get_settings)):
    client = InsightClient(settings)
    try:
        yield client
    finally:
        client.close()
