"""Plain HTTP GET downloads."""

from __future__ import annotations

import os
import shutil
import ssl
import urllib.error
import urllib.request


class DownloadError(Exception):
    """Raised when a download cannot be completed."""

    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f"failed to download {url}: {reason}")
        self.url = url
        self.reason = reason


def _ssl_context(insecure_skip_verify: bool) -> ssl.SSLContext:
    context = ssl.create_default_context()
    if insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def _open(url: str, insecure_skip_verify: bool):
    request = urllib.request.Request(url, method="GET")
    try:
        return urllib.request.urlopen(request, context=_ssl_context(insecure_skip_verify))
    except urllib.error.HTTPError as exc:
        # Any HTTP status is a completed response; its body is returned as is.
        return exc
    except (urllib.error.URLError, ValueError, OSError) as exc:
        raise DownloadError(url, exc) from exc


def http_get_data(url: str, insecure_skip_verify: bool = False) -> bytes:
    """Fetch ``url`` and return the response body, whatever the status code."""
    response = _open(url, insecure_skip_verify)
    with response:
        try:
            return response.read()
        except OSError as exc:
            raise DownloadError(url, exc) from exc


def http_get_file(
    url: str, local_filename: str | os.PathLike, insecure_skip_verify: bool = False
) -> None:
    """Fetch ``url`` into ``local_filename``; a partly written file is removed on failure."""
    response = _open(url, insecure_skip_verify)
    with response:
        try:
            out = open(local_filename, "wb")
        except OSError as exc:
            raise DownloadError(url, exc) from exc
        try:
            with out:
                shutil.copyfileobj(response, out)
        except OSError as exc:
            try:
                os.remove(local_filename)
            except OSError:
                pass
            raise DownloadError(url, exc) from exc