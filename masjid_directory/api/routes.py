# JSON API consumed by the web frontend and the Python client.
# Responses use the {"success": ..., ...} envelope; errors are rendered by
# the exception handlers registered in masjid_directory.main.

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict

from masjid_directory.data.enums import CALCULATION_METHODS, SERVICES
from masjid_directory.models.dto import (
    AuthResponse,
    DistanceRequest,
    DistanceResult,
    ErrorResponse,
    LoginRequest,
    MasjidCreate,
    MasjidUpdate,
    SignupRequest,
    TokenUser,
)
from masjid_directory.services.auth_service import AuthService, public_user
from masjid_directory.services.distance import rank_distances
from masjid_directory.services.masjid_service import MasjidService
from masjid_directory.utils.security import get_current_user

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


def get_masjid_service(request: Request) -> MasjidService:
    return request.app.state.masjid_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def _distance_entry(result: DistanceResult) -> Dict[str, Any]:
    # `error` is only present on entries that failed
    entry = result.model_dump()
    if entry["error"] is None:
        del entry["error"]
    return entry

# ----------------------------------------------------------------------
# Enumerations
# ----------------------------------------------------------------------
@router.get("/calculationmethods")
async def list_calculation_methods():
    return {"methods": list(CALCULATION_METHODS)}


@router.get("/services")
async def list_services():
    return {"services": list(SERVICES)}

# ----------------------------------------------------------------------
# Masajid
# ----------------------------------------------------------------------
@router.post("/masjid", status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
async def create_masjid(
    data: MasjidCreate,
    current_user: TokenUser = Depends(get_current_user),
    masjids: MasjidService = Depends(get_masjid_service),
    auth: AuthService = Depends(get_auth_service),
):
    """Register a masjid: resolve its coordinate, attach today's prayer times, persist."""
    masjid = await masjids.register(data)
    await auth.grant_admin(current_user.userId, masjid.id)
    return {
        "success": True,
        "message": "Masjid created successfully",
        "data": masjid.model_dump(),
    }


@router.get("/masjid")
async def list_masajid(masjids: MasjidService = Depends(get_masjid_service)):
    items = await masjids.list()
    return {
        "success": True,
        "count": len(items),
        "data": [m.model_dump() for m in items],
    }


@router.post("/masjid/distances", responses={400: {"model": ErrorResponse}})
async def calculate_distances(data: DistanceRequest):
    """Mile distances from the user to each masjid stub, in request order."""
    results = rank_distances(data.userLatitude, data.userLongitude, data.masajid)
    return [_distance_entry(r) for r in results]


@router.get("/masjid/{masjid_id}", responses={404: {"model": ErrorResponse}})
async def get_masjid(masjid_id: str, masjids: MasjidService = Depends(get_masjid_service)):
    masjid = await masjids.get(masjid_id)
    return {
        "success": True,
        "count": 1,
        "data": [masjid.model_dump()],
    }


@router.put("/masjid/{masjid_id}", responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}})
async def update_masjid(
    masjid_id: str,
    data: MasjidUpdate,
    current_user: TokenUser = Depends(get_current_user),
    masjids: MasjidService = Depends(get_masjid_service),
    auth: AuthService = Depends(get_auth_service),
):
    # Unknown ids answer 404 even for non-admins
    await masjids.get(masjid_id)
    if not await auth.is_admin(current_user, masjid_id):
        return _forbidden()

    masjid = await masjids.update(masjid_id, data)
    return {
        "success": True,
        "message": "Masjid updated successfully",
        "data": masjid.model_dump(),
    }


@router.get("/masjid/{masjid_id}/admin-check", responses=ERROR_RESPONSES)
async def admin_check(
    masjid_id: str,
    current_user: TokenUser = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    return {"success": True, "isAdmin": await auth.is_admin(current_user, masjid_id)}


def _forbidden() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content=ErrorResponse(error="You are not an admin of this masjid").model_dump(exclude_none=True),
    )

# ----------------------------------------------------------------------
# Auth
# ----------------------------------------------------------------------
@router.post("/auth/signup", status_code=status.HTTP_201_CREATED, response_model=AuthResponse,
             responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def signup(data: SignupRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = await auth.signup(data)
    return AuthResponse(message="User created successfully", user=public_user(user), token=token)


@router.post("/auth/login", response_model=AuthResponse,
             responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}})
async def login(data: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = await auth.login(data)
    return AuthResponse(message="Login successful", user=public_user(user), token=token)


@router.get("/auth/verify", response_model=AuthResponse, response_model_exclude_none=True,
            responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}})
async def verify(
    current_user: TokenUser = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    user = await auth.current(current_user)
    return AuthResponse(message="Token is valid", user=public_user(user))
