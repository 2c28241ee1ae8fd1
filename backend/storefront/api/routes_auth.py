from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.api.deps import authenticate, get_app_settings
from storefront.config import Settings
from storefront.db import get_db
from storefront.errors import NotFound
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user_schema import LoginIn, RegisterIn, TokenOut, user_to_dict
from storefront.services.auth_service import AuthService
from storefront.services.token_service import Identity

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", summary="Register a user", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user = AuthService(db, settings).register(payload)
    return {"message": "User registered", "user": user_to_dict(user)}


@router.post("/login", summary="Log in and receive a bearer token")
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    token = AuthService(db, settings).login(payload)
    out = TokenOut(token=token, expires_in=settings.ACCESS_TOKEN_TTL_SECONDS)
    return out.model_dump(by_alias=True)


@router.get("/me", summary="Current user")
def me(identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    user = UserRepository(db).get(identity.user_id)
    if not user:
        raise NotFound("User not found")
    return user_to_dict(user)
