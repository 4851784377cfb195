# gplanner/remote.py
from __future__ import annotations

import time
from typing import Optional
from urllib import error, parse, request

from .config import fetch_timeout_s
from .errors import ImportFetchError
from .util.console import obs

_OBS = "gplanner.remote"


def fetch_csv_text(url: str, timeout: Optional[float] = None) -> str:
    """GET `url` once and return its body as text.

    No retries. Failures raise ImportFetchError carrying the HTTP status and
    reason when the server answered.
    """
    u = (url or "").strip()
    scheme = parse.urlsplit(u).scheme.lower()
    if scheme not in ("http", "https"):
        raise ImportFetchError(f"Unsupported URL scheme {scheme or '(none)'!r}; use http or https.")

    req = request.Request(u, method="GET")
    req.add_header("Accept", "text/csv, text/plain;q=0.9, */*;q=0.5")
    t0 = time.monotonic()
    try:
        with request.urlopen(req, timeout=timeout or fetch_timeout_s()) as resp:
            raw = resp.read()
            charset = resp.headers.get_content_charset() or "utf-8"
    except error.HTTPError as e:
        raise ImportFetchError(
            f"Failed to fetch CSV: HTTP {e.code} {e.reason}",
            status=e.code,
            reason=str(e.reason),
        ) from e
    except error.URLError as e:
        raise ImportFetchError(f"Failed to fetch CSV: {e.reason}", reason=str(e.reason)) from e
    except (OSError, ValueError) as e:
        raise ImportFetchError(f"Failed to fetch CSV: {e}") from e

    elapsed_ms = int((time.monotonic() - t0) * 1000)
    obs(_OBS, f"fetched {len(raw)} bytes from {u} in {elapsed_ms}ms")
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        obs(_OBS, f"unknown charset {charset!r}; decoding as utf-8")
        return raw.decode("utf-8", errors="replace")


__all__ = ["fetch_csv_text"]
