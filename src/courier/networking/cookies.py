"""Cookie jar helpers built on requests' RequestsCookieJar."""

from __future__ import annotations

import json
import logging
import os
from http.cookiejar import Cookie, CookieJar
from typing import Any

from requests.cookies import RequestsCookieJar, create_cookie

logger = logging.getLogger(__name__)


class FileCookieJar(RequestsCookieJar):
    """Cookie jar persisted to a JSON file.

    The file is loaded on construction when it exists and written back by
    ``save``. Session cookies are kept unless ``store_session_cookies`` is
    False.
    """

    def __init__(
        self,
        filename: str | os.PathLike[str],
        store_session_cookies: bool = True,
        policy: Any = None,
    ) -> None:
        super().__init__(policy)
        self.filename = os.fspath(filename)
        self.store_session_cookies = store_session_cookies
        if os.path.exists(self.filename):
            self.load()

    def save(self) -> None:
        records = [
            _cookie_to_dict(cookie)
            for cookie in self
            if self.store_session_cookies or not cookie.discard
        ]
        with open(self.filename, "w", encoding="utf-8") as handle:
            json.dump(records, handle)
        logger.debug("Saved %d cookies to %s", len(records), self.filename)

    def load(self) -> None:
        with open(self.filename, encoding="utf-8") as handle:
            raw = handle.read()
        if not raw.strip():
            return
        try:
            records = json.loads(raw)
        except ValueError as exc:
            raise ValueError(
                f"Invalid cookie file: {self.filename}"
            ) from exc
        if not isinstance(records, list):
            raise ValueError(f"Invalid cookie file: {self.filename}")
        for record in records:
            self.set_cookie(_cookie_from_dict(record))


def get_cookie_by_name(jar: CookieJar, name: str) -> Cookie | None:
    """Return the first cookie called ``name``, or None."""
    for cookie in jar:
        if cookie.name == name:
            return cookie
    return None


def _cookie_to_dict(cookie: Cookie) -> dict[str, Any]:
    return {
        "name": cookie.name,
        "value": cookie.value,
        "domain": cookie.domain,
        "path": cookie.path,
        "expires": cookie.expires,
        "secure": cookie.secure,
        "discard": cookie.discard,
        "http_only": cookie.has_nonstandard_attr("HttpOnly"),
    }


def _cookie_from_dict(record: dict[str, Any]) -> Cookie:
    rest = {"HttpOnly": None} if record.get("http_only") else {}
    return create_cookie(
        record["name"],
        record.get("value"),
        domain=record.get("domain") or "",
        path=record.get("path") or "/",
        expires=record.get("expires"),
        secure=bool(record.get("secure")),
        discard=bool(record.get("discard")),
        rest=rest,
    )
