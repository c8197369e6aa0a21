from datetime import datetime, timedelta, timezone
from typing import Optional, Dict
import logging
import uuid

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from ..settings import settings

router = APIRouter(prefix="/admin", tags=["auth"])

logger = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/admin/auth")

ADMIN_SUBJECT = "admin"


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class Admin(BaseModel):
	username: str = ADMIN_SUBJECT


class AdminAuthRequest(BaseModel):
	password: str


# Hash of the configured admin password, keyed by the plain value so a changed setting is picked up
_hashes: Dict[str, str] = {}


def _admin_password_hash() -> Optional[str]:
	password = settings.admin_password
	if not password:
		return None
	if password not in _hashes:
		_hashes.clear()
		_hashes[password] = pwd_context.hash(password)
	return _hashes[password]


def verify_admin_password(plain_password: str) -> bool:
	hashed = _admin_password_hash()
	if hashed is None:
		logger.warning("ADMIN_PASSWORD is not set; admin login is disabled")
		return False
	return pwd_context.verify(plain_password, hashed)


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = settings.access_token_expire_minutes
		delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=1)
	return datetime.now(timezone.utc) + delta


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	to_encode.update({"exp": _resolve_expiry(expires_delta)})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@router.post("/auth", response_model=Token)
async def login(req: AdminAuthRequest):
	if not verify_admin_password(req.password or ""):
		raise HTTPException(status_code=401, detail="パスワードが正しくありません")
	access_token = create_access_token({"sub": ADMIN_SUBJECT, "jti": uuid.uuid4().hex})
	return Token(access_token=access_token)


def get_current_admin(token: str = Depends(oauth2_scheme)) -> Admin:
	credentials_exception = HTTPException(
		status_code=401,
		detail="Could not validate credentials",
		headers={"WWW-Authenticate": "Bearer"},
	)
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise credentials_exception
	if payload.get("sub") != ADMIN_SUBJECT:
		raise credentials_exception
	return Admin()


@router.get("/me", response_model=Admin)
async def me(admin: Admin = Depends(get_current_admin)):
	return admin
