# tasktrack/utils/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from tasktrack.config.settings import settings
from tasktrack.models.user import UserRole
from tasktrack.schemas.user import Actor
from tasktrack.utils.errors import ForbiddenError
from tasktrack.utils.permissions import parse_role

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

def get_current_actor(token: str = Depends(oauth2_scheme)) -> Actor:
    """Resolve the bearer token into the acting user's id and role"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        user_id = int(subject)
    except (JWTError, ValueError):
        raise credentials_exception

    # Unknown roles stop here, before reaching any policy decision
    role = parse_role(payload.get("role"))
    return Actor(id=user_id, role=role)

def require_roles(*roles: UserRole):
    """Dependency factory restricting a route to the given roles"""
    def checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise ForbiddenError("You do not have permission to access this resource")
        return actor
    return checker
