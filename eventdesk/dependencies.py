from fastapi import Cookie, Depends
from typing import Optional
from itsdangerous import URLSafeTimedSerializer, BadSignature
from beanie import PydanticObjectId

from eventdesk.config import settings
from eventdesk.errors import Unauthorized
from eventdesk.models import User
from eventdesk.utils.helpers import is_object_id

signer = URLSafeTimedSerializer(settings.SECRET_KEY, salt="user-session")

def make_session_token(user: User) -> str:
    return signer.dumps({"user_id": str(user.id)})

async def get_current_user(session: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE)) -> Optional[User]:
    if not session:
        return None

    try:
        data = signer.loads(session, max_age=settings.SESSION_EXPIRY)
    except BadSignature:
        return None

    user_id = data.get("user_id") if isinstance(data, dict) else None
    if not is_object_id(user_id):
        return None
    return await User.get(PydanticObjectId(user_id))

async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise Unauthorized("Unauthorized")
    return user
