from fastapi import APIRouter, Depends

from podboard.session.schemas import Identity
from podboard_api.core.services import (
    Services,
    get_identity,
    get_services,
    get_session_id,
)
from podboard_api.schemas.v1.requests import SignInRequest, SignUpRequest
from podboard_api.schemas.v1.responses import ErrorResponse, IdentityResponse

router = APIRouter(prefix="/auth", tags=["auth"])


def _describe(identity: Identity, services: Services) -> IdentityResponse:
    quota = services.quota
    return IdentityResponse(
        kind=identity.kind,
        session_id=identity.session_id,
        user=services.sessions.load_user(identity.session_id),
        trial_limit=quota.limit(identity),
        trials_remaining=quota.remaining(identity),
        trial_message=quota.trial_message(identity),
    )


@router.get("/me", response_model=IdentityResponse)
async def who_am_i(
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> IdentityResponse:
    return _describe(identity, services)


@router.post(
    "/signup",
    response_model=IdentityResponse,
    responses={400: {"model": ErrorResponse}},
)
async def sign_up(
    request: SignUpRequest,
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> IdentityResponse:
    identity = services.sessions.sign_up(
        session_id, request.name, request.email, request.password
    )
    return _describe(identity, services)


@router.post(
    "/signin",
    response_model=IdentityResponse,
    responses={400: {"model": ErrorResponse}},
)
async def sign_in(
    request: SignInRequest,
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> IdentityResponse:
    identity = services.sessions.sign_in(session_id, request.email, request.password)
    return _describe(identity, services)


@router.post("/signout", response_model=IdentityResponse)
async def sign_out(
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> IdentityResponse:
    identity = services.sessions.sign_out(session_id)
    return _describe(identity, services)
