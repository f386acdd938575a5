"""Signed API cookie extraction from a live browser session."""

import asyncio
from typing import Dict, Iterable, Optional

from .errors import CredentialUnavailableError
from .models import (
    AUTHORIZATION_COOKIE,
    DEFAULT_COOKIE_RETRY_DELAY,
    SIGNATURE_COOKIE,
    Credential,
)


def _find_cookie(jar: Iterable[Dict], name: str) -> Optional[str]:
    for cookie in jar:
        if cookie.get("name") == name:
            value = cookie.get("value")
            if value:
                return value
    return None


def credential_from_jar(jar: Iterable[Dict]) -> Optional[Credential]:
    """Build a Credential from a cookie jar, or None if either cookie is missing."""
    cookies = list(jar)
    authorization = _find_cookie(cookies, AUTHORIZATION_COOKIE)
    signature = _find_cookie(cookies, SIGNATURE_COOKIE)
    if authorization is None or signature is None:
        return None
    return Credential(authorization=authorization, signature=signature)


async def extract_credential(
    session,
    api_url: str,
    retry_delay: float = DEFAULT_COOKIE_RETRY_DELAY,
) -> Credential:
    """Read the signed API cookies for *api_url* from *session*.

    Cookies are set asynchronously after navigation, so a missing pair is
    re-read exactly once after *retry_delay* seconds before giving up.
    """
    credential = credential_from_jar(await session.cookies_for(api_url))
    if credential is not None:
        return credential

    print(f"API cookies not set yet; retrying in {retry_delay:g}s...")
    await asyncio.sleep(retry_delay)

    credential = credential_from_jar(await session.cookies_for(api_url))
    if credential is not None:
        return credential

    raise CredentialUnavailableError(
        f"Cookies {AUTHORIZATION_COOKIE} and {SIGNATURE_COOKIE} were not found "
        f"for {api_url} after one retry"
    )
