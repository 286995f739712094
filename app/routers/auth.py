from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import bcrypt

from ..constants import ROLE_SUPER_ADMIN, ROLE_USER
from ..db import get_db
from ..models import User
from ..schemas.user import LoginRequest, SignupRequest
from ..services.access import Principal

router = APIRouter(prefix="/auth", tags=["auth"])


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def get_current_principal(request: Request) -> Principal:
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return Principal.from_session(user)


def _login(request: Request, user: User) -> dict:
    payload = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "full_name": user.full_name,
    }
    request.session["user"] = payload
    return payload


@router.post("/signup")
async def signup(request: Request, payload: SignupRequest, db: Session = Depends(get_db)):
    email = payload.email.lower()
    existing = db.query(User).filter(User.email == email).one_or_none()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    role = ROLE_SUPER_ADMIN if db.query(User).count() == 0 else ROLE_USER
    user = User(
        email=email,
        full_name=(payload.full_name or "").strip() or None,
        password_hash=get_password_hash(payload.password),
        role=role,
    )
    db.add(user)
    db.commit()
    return JSONResponse({"status": "created", "user": _login(request, user)}, status_code=status.HTTP_201_CREATED)


@router.post("/login")
async def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email.lower()).one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid login credentials")
    return JSONResponse({"status": "ok", "user": _login(request, user)})


@router.post("/logout")
async def logout(request: Request):
    request.session.pop("user", None)
    return JSONResponse({"status": "logged_out"})


@router.get("/me")
async def me(request: Request):
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return JSONResponse({"user": user})
