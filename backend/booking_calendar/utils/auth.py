from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import jwt
from jwt import InvalidTokenError


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: Optional[str] = None


def create_access_token(
    *,
    user_id: str,
    secret: str,
    email: Optional[str] = None,
    algorithm: str = "HS256",
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(hours=24))
    payload: dict[str, object] = {"sub": str(user_id), "iat": now, "exp": exp}
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(
    token: str,
    *,
    secret: str,
    algorithms: Sequence[str],
) -> Principal:
    try:
        payload = jwt.decode(token, secret, algorithms=list(algorithms))
    except InvalidTokenError as exc:  # includes ExpiredSignatureError
        raise ValueError("invalid token") from exc

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise ValueError("token missing sub")
    email = payload.get("email")
    return Principal(user_id=sub, email=email if isinstance(email, str) else None)
