from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from eventdesk.config import settings
from eventdesk.dependencies import make_session_token, require_user
from eventdesk.errors import BadRequest, Unauthorized
from eventdesk.models import User
from eventdesk.schemas import LoginRequest, SignupRequest
from eventdesk.services.activity_service import log_activity
from eventdesk.utils.auth import Hash

router = APIRouter(prefix="/api/auth", tags=["auth"])

def user_to_public(user: User) -> dict:
    return {
        "id": str(user.id),
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "role": user.role,
        "userType": user.user_type,
    }

def session_response(user: User, status_code: int = 200) -> JSONResponse:
    response = JSONResponse({"user": user_to_public(user)}, status_code=status_code)
    response.set_cookie(
        key=settings.SESSION_COOKIE,
        value=make_session_token(user),
        max_age=settings.SESSION_EXPIRY,
        httponly=True,
        samesite="lax",
        secure=settings.APP_URL.startswith("https://"),
    )
    return response

@router.post("/signup")
async def signup(payload: SignupRequest):
    email = payload.email.lower()
    if await User.find_one(User.email == email):
        raise BadRequest("An account with this email already exists")

    user = User(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=email,
        password=Hash.make(payload.password),
    )
    await user.insert()
    return session_response(user, status_code=201)

@router.post("/login")
async def login(request: Request, payload: LoginRequest):
    user = await User.find_one(User.email == payload.email.lower())

    valid, new_hash = Hash.check(payload.password, user.password) if user else (False, None)
    if valid:
        if new_hash:
            user.password = new_hash
            await user.save()
        await log_activity(request, "login", "Login successful", user)
        return session_response(user)

    await log_activity(request, "login_failed", f"Failed login attempt for email: {payload.email}")
    raise Unauthorized("Invalid credentials")

@router.post("/logout")
async def logout(request: Request):
    await log_activity(request, "logout", "User logged out")
    response = JSONResponse({"success": True})
    response.delete_cookie(settings.SESSION_COOKIE)
    return response

@router.get("/me")
async def me(user: User = Depends(require_user)):
    return {"user": user_to_public(user)}
