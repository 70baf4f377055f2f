# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Cookie transport — read the token cookie and serialize ``Set-Cookie`` headers.

Values are percent-encoded on write and decoded on read, so a token
survives any client that treats ``:`` specially.
"""

from __future__ import annotations

from http.cookies import SimpleCookie
from urllib.parse import quote, unquote

from starlette.requests import cookie_parser

from securestate.core.properties import CookieOptions


def read_cookie(cookie_header: str | None, name: str) -> str | None:
    """Return the decoded value of cookie *name* from a ``Cookie`` header, or ``None``."""
    if not cookie_header:
        return None
    value = cookie_parser(cookie_header).get(name)
    if not value:
        return None
    return unquote(value)


def write_cookie(
    name: str,
    value: str,
    options: CookieOptions,
    *,
    production: bool = False,
    max_age: int | None = None,
) -> str:
    """Serialize a ``Set-Cookie`` header value.

    ``Secure`` is only emitted when the options request it *and* the
    deployment is production. *max_age* overrides ``options.max_age``.
    """
    cookie: SimpleCookie = SimpleCookie()
    cookie[name] = quote(value, safe="")
    morsel = cookie[name]

    if options.path:
        morsel["path"] = options.path
    if options.domain:
        morsel["domain"] = options.domain
    if options.http_only:
        morsel["httponly"] = True
    if options.same_site:
        morsel["samesite"] = options.same_site
    if options.secure and production:
        morsel["secure"] = True

    age = max_age if max_age is not None else options.max_age
    if age is not None:
        morsel["max-age"] = age

    return cookie.output(header="").strip()


def delete_cookie(name: str, options: CookieOptions, *, production: bool = False) -> str:
    """Serialize a ``Set-Cookie`` header that expires cookie *name* immediately."""
    header = write_cookie(name, "", options, production=production, max_age=0)
    return f"{header}; expires=Thu, 01 Jan 1970 00:00:00 GMT"
