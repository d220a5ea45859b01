"""
    Authentication Endpoints
    GitHub OAuth login and the cookie session built on it. No passwords are stored; GitHub is the only identity provider.
    Endpoints:
    - /github: Starts the OAuth handshake, stores the CSRF state cookie and redirects to GitHub.
    - /callback/github: Verifies the CSRF state, completes the handshake, upserts the user and sets the session cookie.
    - /logout: Clears the session cookie.
    - /me: Returns the current authenticated user's record.
    Security Features:
    - Constant-time comparison of the CSRF state against the httpOnly cookie.
    - Stable error codes in the login redirect; provider payloads never reach the URL.
    - httpOnly, sameSite=lax session cookie, secure in production.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_db, get_oauth_flow, get_session_manager
from app.core.logging import capture_error
from app.core.session import SessionManager
from app.models.user import User
from app.schemas.user import MessageOut, UserEnvelope
from app.services.oauth import OAuthErrorCode, OAuthFailure, OAuthFlow
from app.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _clear_state_cookie(response, flow: OAuthFlow) -> None:
    response.delete_cookie(
        flow.config.state_cookie_name,
        path="/",
        httponly=True,
        secure=flow.config.secure_cookies,
        samesite="lax",
    )


@router.get("/github")
async def github_login(flow: OAuthFlow = Depends(get_oauth_flow)):
    """
    Redirect to GitHub's authorization page.

    The random state travels in a short-lived httpOnly cookie and comes back
    as a query parameter on the callback.
    """
    if not flow.is_configured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="GitHub OAuth is not configured",
        )

    authorization_url, state = flow.start()
    response = RedirectResponse(authorization_url)
    response.set_cookie(
        flow.config.state_cookie_name,
        state,
        max_age=flow.config.state_max_age_seconds,
        path="/",
        httponly=True,
        secure=flow.config.secure_cookies,
        samesite="lax",
    )
    return response


@router.get("/callback/github")
async def github_callback(
    request: Request,
    code: str = None,
    state: str = None,
    flow: OAuthFlow = Depends(get_oauth_flow),
    manager: SessionManager = Depends(get_session_manager),
    db: AsyncSession = Depends(get_db),
):
    """
    Complete the handshake.

    Success sets the session cookie and redirects to the dashboard; every
    failure redirects to the login page with a stable error code.
    """
    stored_state = request.cookies.get(flow.config.state_cookie_name)
    try:
        outcome = await flow.complete(db, code, state, stored_state)
    except Exception as e:
        logger.error("OAuth callback failed unexpectedly", error=type(e).__name__)
        capture_error(e, tags={"flow": "oauth_callback"})
        outcome = OAuthFailure(OAuthErrorCode.UNEXPECTED_ERROR)

    if isinstance(outcome, OAuthFailure):
        return RedirectResponse(flow.login_error_url(outcome.code))

    response = RedirectResponse(flow.success_url)
    manager.set_cookie(response, manager.issue(outcome.as_session_identity()))
    _clear_state_cookie(response, flow)
    return response


@router.post("/logout", response_model=MessageOut)
async def logout(manager: SessionManager = Depends(get_session_manager)):
    """Drop the session cookie. Safe to call without a session."""
    response = JSONResponse({"message": "Logged out successfully"})
    manager.revoke(response)
    return response


@router.get("/me", response_model=UserEnvelope)
async def me(current_user: User = Depends(get_current_user)):
    """Return the user record behind the session cookie."""
    return {"user": current_user}
