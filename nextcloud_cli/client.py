"""
HTTP client for a Nextcloud / ownCloud instance.

File operations go through WebDAV (remote.php/webdav), group folders through
the Apps API (apps/groupfolders) and shares through the OCS files_sharing API.
"""

import glob
import logging
import os
import posixpath
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote, urlparse

import requests
from requests.auth import HTTPBasicAuth

from .errors import APIError, ConfigurationError, DecodeError, NextcloudError, RemoteError, ResponseDecodeError, TransportError
from .storage import ShareResult, Storage, parse_request_error, parse_share_result

logger = logging.getLogger(__name__)

WEBDAV_PATH = "remote.php/webdav"
APPS_PATH = "apps"
SHARES_PATH = "ocs/v2.php/apps/files_sharing/api/v1"

APPS_SUCCESS = 100
OCS_SUCCESS = 200

SHARE_TYPE_PUBLIC_LINK = 3

PERMISSION_READ = 1
PERMISSION_CREATE = 4
PERMISSION_ALL = 31

# How WebDAV errors are detected.
#   body:   any body starting with "<" that decodes to an error with an
#           exception is an error, whatever the HTTP status.
#   status: non-2xx is an error; 2xx bodies are always payload.
DETECT_BODY = "body"
DETECT_STATUS = "status"
ERROR_DETECTION_MODES = (DETECT_BODY, DETECT_STATUS)


def _join(*parts: str) -> str:
    """Join path pieces, dropping empty and '.' segments and quoting the rest."""
    segments = []
    for part in parts:
        for seg in part.split("/"):
            if seg in ("", "."):
                continue
            segments.append(quote(seg, safe=""))
    return "/".join(segments)


class NextcloudClient(Storage):
    """Storage backed by a {own|next}cloud server.

    The URL and credentials are fixed at construction; no request is sent
    until an operation is called.
    """

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        timeout: Optional[float] = None,
        error_detection: str = DETECT_BODY,
    ):
        if not url:
            raise ConfigurationError("missing url")
        if not username or not password:
            raise ConfigurationError("missing credentials")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError("invalid url")
        if error_detection not in ERROR_DETECTION_MODES:
            raise ConfigurationError(f"unknown error detection mode: {error_detection}")

        self._url = url.rstrip("/")
        self._username = username
        self._password = password
        self._timeout = timeout
        self._error_detection = error_detection

    @property
    def url(self) -> str:
        return self._url

    @property
    def username(self) -> str:
        return self._username

    @property
    def password(self) -> str:
        return self._password

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    @property
    def error_detection(self) -> str:
        return self._error_detection

    def __repr__(self) -> str:
        return f"NextcloudClient(url={self._url!r}, username={self._username!r})"

    def _auth(self) -> HTTPBasicAuth:
        return HTTPBasicAuth(self._username, self._password)

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug(f"{method} {url}")
        try:
            return requests.request(method, url, auth=self._auth(), timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(e) from e

    # --- WebDAV ---

    def _webdav(self, method: str, path: str, data: Optional[bytes] = None) -> bytes:
        url = f"{self._url}/{_join(WEBDAV_PATH, path)}"
        resp = self._send(method, url, data=data)
        body = resp.content

        if self._error_detection == DETECT_STATUS:
            if resp.ok:
                return body
            exception, message = f"HTTP {resp.status_code}", resp.reason or ""
            if body.startswith(b"<"):
                try:
                    err = parse_request_error(body)
                except DecodeError:
                    err = None
                if err is not None and err.exception:
                    exception, message = err.exception, err.message
            raise RemoteError(exception, message, resp.status_code)

        if body.startswith(b"<"):
            err = parse_request_error(body)
            if err.exception:
                raise RemoteError(err.exception, err.message, resp.status_code)
        return body

    def mkdir(self, path: str) -> None:
        self._webdav("MKCOL", path)

    def delete(self, path: str) -> None:
        self._webdav("DELETE", path)

    def upload(self, src: bytes, dest: str) -> None:
        self._webdav("PUT", dest, src)

    def upload_dir(self, src: str, dest: str) -> List[str]:
        """Upload every file matching the glob `src` into `dest`.

        Stops at the first read or upload error; files uploaded before it
        stay on the server.
        """
        files = sorted(glob.glob(src))
        for file in files:
            data = Path(file).read_bytes()
            self.upload(data, posixpath.join(dest, os.path.basename(file)))
        return files

    def download(self, path: str) -> bytes:
        return self._webdav("GET", path)

    def exists(self, path: str) -> bool:
        try:
            self._webdav("PROPFIND", path)
        except NextcloudError as e:
            logger.debug(f"{path} does not exist: {e}")
            return False
        return True

    # --- OCS ---

    def _ocs(
        self,
        operation: str,
        method: str,
        url: str,
        expected: int,
        data: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> ShareResult:
        headers = {
            "OCS-APIRequest": "true",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        resp = self._send(method, url, headers=headers, data=data, params=params)
        try:
            result = parse_share_result(resp.content)
        except DecodeError as e:
            raise ResponseDecodeError(operation, str(e)) from e
        if result.status_code != expected:
            raise APIError(operation, result.status_code, result.message)
        return result

    def _apps(self, operation: str, path: str, data: Dict[str, str], name: str = "") -> ShareResult:
        url = f"{self._url}/{_join(APPS_PATH, path)}"
        if name:
            # A single segment even if it contains "/".
            url = f"{url}/{quote(name, safe='')}"
        return self._ocs(operation, "POST", url, APPS_SUCCESS, data=data)

    def _shares(
        self,
        operation: str,
        method: str,
        path: str = "",
        data: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> ShareResult:
        url = f"{self._url}/{_join(SHARES_PATH, 'shares', path)}"
        return self._ocs(operation, method, url, OCS_SUCCESS, data=data, params=params)

    def create_group_folder(self, mount_point: str) -> ShareResult:
        return self._apps("create group folder", "groupfolders/folders", {"mountpoint": mount_point})

    def add_group_to_group_folder(self, group: str, folder_id: int) -> ShareResult:
        return self._apps(
            "add group to group folder",
            f"groupfolders/folders/{folder_id}/groups",
            {"group": group},
        )

    def set_group_permissions_for_group_folder(self, permissions: int, group: str, folder_id: int) -> ShareResult:
        return self._apps(
            "set group folder permissions",
            f"groupfolders/folders/{folder_id}/groups",
            {"permissions": str(permissions)},
            name=group,
        )

    def create_share(self, path: str, share_type: int, public_upload: str, permissions: int) -> ShareResult:
        return self._shares("create share", "POST", data={
            "path": path,
            "shareType": str(share_type),
            "publicUpload": public_upload,
            "permissions": str(permissions),
        })

    def get_share(self, path: str) -> ShareResult:
        return self._shares("get share", "GET", params={"path": path})

    def delete_share(self, share_id: int) -> ShareResult:
        return self._shares("delete share", "DELETE", str(share_id))

    def _create_public_share(self, path: str, permissions: int) -> ShareResult:
        # Link shares are created with upload enabled, then narrowed.
        created = self.create_share(path, SHARE_TYPE_PUBLIC_LINK, "true", PERMISSION_CREATE)
        return self._shares(
            "update share permissions", "PUT", str(created.id),
            data={"permissions": str(permissions)},
        )

    def create_file_drop_share(self, path: str) -> ShareResult:
        return self._create_public_share(path, PERMISSION_CREATE)

    def create_read_only_share(self, path: str) -> ShareResult:
        return self._create_public_share(path, PERMISSION_READ)


def create_storage(url: str, username: str, password: str, **kwargs) -> Storage:
    """Build the default Storage backend for a server URL."""
    return NextcloudClient(url, username, password, **kwargs)
