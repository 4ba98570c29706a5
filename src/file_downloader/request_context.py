"""
Values the website attaches to every request: the reader's language, the
collection being previewed, and the publisher's access token. Each one can
arrive as a header (set by the frontend router) or as a browser cookie.
"""

from typing import Optional

from flask import Request


LOCALE_HEADER = "LocaleCode"
LOCALE_COOKIE = "lang"
COLLECTION_ID_HEADER = "Collection-Id"
COLLECTION_ID_COOKIE = "collection"
FLORENCE_HEADER = "X-Florence-Token"
FLORENCE_COOKIE = "access_token"

DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES = ("en", "cy")

BEARER_PREFIX = "Bearer "


def get_locale_code(request: Request) -> str:
    locale = request.headers.get(LOCALE_HEADER) or request.cookies.get(LOCALE_COOKIE) or ""
    locale = locale.strip().lower()
    if locale in SUPPORTED_LOCALES:
        return locale
    return DEFAULT_LOCALE


def get_collection_id(request: Request) -> Optional[str]:
    return request.headers.get(COLLECTION_ID_HEADER) or request.cookies.get(COLLECTION_ID_COOKIE) or None


def get_access_token(request: Request) -> Optional[str]:
    token = request.headers.get(FLORENCE_HEADER)
    if token:
        if token.startswith(BEARER_PREFIX):
            token = token[len(BEARER_PREFIX):]
        return token or None
    return request.cookies.get(FLORENCE_COOKIE) or None
