"""Caller identity helpers and route dependencies."""

from fastapi import Depends, Header, HTTPException, Request, status


def get_owner_id(
    request: Request,
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_internal_token: str | None = Header(default=None, alias="X-Internal-Token"),
) -> str | None:
    """
    Return the caller identity forwarded by the identity provider.

    The upstream gateway authenticates the user and sets ``X-User-Id``. When a
    gateway token is configured, the header is only trusted on requests that
    also carry the matching ``X-Internal-Token``.
    """

    settings = request.app.state.settings
    if settings.gateway_token and x_internal_token != settings.gateway_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid gateway token.",
        )

    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()


OwnerDependency = Depends(get_owner_id)
