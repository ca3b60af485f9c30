from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError

from stoper.db import get_session
from stoper.models import User
from stoper.schemas import UserCreate, Token
from stoper.security import hash_password, verify_password, create_access_token
from stoper.error import _auth_401, abort

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
def register(data: UserCreate, session: Session = Depends(get_session)):
    existing = session.exec(select(User).where(User.username == data.username)).first()
    if existing:
        abort(409, "USERNAME_EXISTS", "Nome de usuário já existe")

    user = User(username=data.username, password_hash=hash_password(data.password))
    session.add(user)

    # unique constraint still guards the race between the check and the insert
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        abort(409, "USERNAME_EXISTS", "Nome de usuário já existe")

    return {"ok": True}


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    user = session.exec(select(User).where(User.username == form_data.username)).first()
    if (not user) or (not verify_password(form_data.password, user.password_hash)):
        raise _auth_401("INVALID_CREDENTIALS", "Usuário ou senha incorretos")

    token = create_access_token(user.username)
    return {"access_token": token, "token_type": "bearer"}
