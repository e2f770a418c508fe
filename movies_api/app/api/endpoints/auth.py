"""
Token endpoint for test clients.

``GET /auth/fake-token`` returns a freshly signed bearer token that the
movies routes accept for ``settings.token_freshness_seconds``.  No
credentials are checked.
"""

from fastapi import APIRouter, Request

from movies_api.app.core.security import issue_token
from movies_api.app.schemas.auth import TokenRead

router = APIRouter()


@router.get("/fake-token", response_model=TokenRead)
async def fake_token(request: Request) -> TokenRead:
    return TokenRead(token=issue_token(request.app.state.settings), status=200)
