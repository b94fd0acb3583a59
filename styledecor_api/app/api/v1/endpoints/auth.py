"""
Credential issuance for API v1.

The frontend authenticates users with its identity provider and then
exchanges the signed-in email for a session token here.  Tokens live
for one hour.
"""

from fastapi import APIRouter, Depends

from styledecor_api.app.core.policy import Operation, authorize
from styledecor_api.app.core.security import TokenService, get_token_service
from styledecor_api.app.schemas.auth import TokenRequest, TokenResponse
from styledecor_api.app.services.user_service import normalize_email


router = APIRouter()


@router.post("/jwt", response_model=TokenResponse)
def issue_token(body: TokenRequest, tokens: TokenService = Depends(get_token_service)) -> TokenResponse:
    authorize(None, Operation.ISSUE_TOKEN)
    email = normalize_email(body.email)
    return TokenResponse(token=tokens.issue(email), expires_in=tokens.expire_seconds)
