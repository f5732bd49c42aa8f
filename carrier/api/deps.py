"""Request dependencies shared by the routers."""

from typing import Optional

from fastapi import Header, HTTPException


def require_callsign(x_callsign: Optional[str] = Header(None)) -> str:
    """Callsign of the caller, as resolved by the authentication layer in front of us."""
    if not x_callsign or not x_callsign.strip():
        raise HTTPException(
            status_code=401,
            detail={"error_code": "UNAUTHENTICATED", "message": "Missing X-Callsign header"},
        )
    return x_callsign.strip().upper()


def optional_callsign(x_callsign: Optional[str] = Header(None)) -> Optional[str]:
    if not x_callsign or not x_callsign.strip():
        return None
    return x_callsign.strip().upper()
