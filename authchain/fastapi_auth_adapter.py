from fastapi import HTTPException, Request
from starlette import status

from authchain.authentication.profile import UserProfile, get_user_profile


def build_fastapi_profile_dependency():
    async def profile_dependency(request: Request) -> UserProfile:
        profile = get_user_profile(request)
        if profile is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized",
            )
        return profile

    return profile_dependency
