import hmac
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from ..settings import settings
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import AuthSession

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class User(BaseModel):
	username: str


def _credentials_error() -> HTTPException:
	return HTTPException(status_code=401, detail="Could not validate credentials", headers={"WWW-Authenticate": "Bearer"})


def _matches(given: str, expected: str) -> bool:
	return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def authenticate_user(username: str, password: str) -> Optional[User]:
	# The app has exactly one login, taken from settings
	user_ok = _matches(username, settings.app_username)
	pass_ok = _matches(password, settings.app_password)
	if user_ok and pass_ok:
		return User(username=settings.app_username)
	return None


def _token_lifetime() -> timedelta:
	minutes = settings.access_token_expire_minutes
	return timedelta(minutes=minutes) if minutes > 0 else timedelta(days=30)


def create_access_token(username: str, session_id: str, expires_delta: Optional[timedelta] = None) -> str:
	now = datetime.now(timezone.utc)
	try:
		expires = now + (expires_delta or _token_lifetime())
	except OverflowError:
		expires = datetime.max.replace(tzinfo=timezone.utc)
	claims = {"sub": username, "jti": session_id, "exp": expires}
	return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode(token: str) -> tuple:
	"""Return (username, session_id) from a valid token."""
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise _credentials_error()
	username, session_id = payload.get("sub"), payload.get("jti")
	if not username or not session_id:
		raise _credentials_error()
	return username, session_id


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	user = authenticate_user(form_data.username, form_data.password)
	if not user:
		logger.info("Rejected login for %r", form_data.username)
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	# Each login gets its own session row; the token's jti points at it
	session_id = uuid.uuid4().hex
	try:
		db.add(AuthSession(session_id=session_id, username=user.username))
		db.commit()
	except Exception:
		db.rollback()
		logger.exception("Could not persist auth session")
		raise HTTPException(status_code=503, detail="could not start session")
	return Token(access_token=create_access_token(user.username, session_id))


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
	username, session_id = _decode(token)
	# A purged or revoked session invalidates the token
	try:
		row = db.get(AuthSession, session_id)
		if row is None or row.username != username:
			raise _credentials_error()
		row.last_activity_at = datetime.utcnow()
		db.commit()
	except HTTPException:
		raise
	except Exception:
		db.rollback()
		logger.exception("Session lookup failed")
		raise _credentials_error()
	return User(username=username)


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
	return user


@router.post("/logout", status_code=204)
async def logout(token: str = Depends(oauth2_scheme), user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	_, session_id = _decode(token)
	row = db.get(AuthSession, session_id)
	if row is not None:
		db.delete(row)
		db.commit()
