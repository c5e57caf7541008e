import glob
import os
import posixpath
from pathlib import Path

import pytest
import requests

from nextcloud_cli.client import NextcloudClient
from nextcloud_cli.errors import RemoteError
from nextcloud_cli.storage import ShareElement, ShareResult, Storage


def make_response(status_code=200, body=b"", reason="OK"):
    resp = requests.Response()
    resp.status_code = status_code
    resp.reason = reason
    resp._content = body if isinstance(body, bytes) else body.encode("utf-8")
    return resp


def ocs_body(statuscode, data="", message="OK", status="ok"):
    return (
        f'<?xml version="1.0"?>\n<ocs><meta><status>{status}</status>'
        f"<statuscode>{statuscode}</statuscode><message>{message}</message></meta>"
        f"<data>{data}</data></ocs>"
    ).encode("utf-8")


def sabre_error(exception, message):
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<d:error xmlns:d="DAV:" xmlns:s="http://sabredav.org/ns">'
        f"<s:exception>{exception}</s:exception><s:message>{message}</s:message></d:error>"
    ).encode("utf-8")


NOT_FOUND = sabre_error("Sabre\\DAV\\Exception\\NotFound", "File with name Test could not be located")


class InMemoryStorage(Storage):
    """Dict-backed Storage used to exercise callers without a server."""

    def __init__(self, fail_on=()):
        self.files = {}
        self.dirs = set()
        self.shares = {}
        self.fail_on = set(fail_on)
        self._next_id = 1

    def _check(self, path):
        if path in self.fail_on:
            raise RemoteError("Sabre\\DAV\\Exception\\Forbidden", f"cannot write {path}", 403)

    def mkdir(self, path):
        self._check(path)
        if path in self.dirs:
            raise RemoteError("Sabre\\DAV\\Exception\\MethodNotAllowed", "The resource you tried to create already exists", 405)
        self.dirs.add(path)

    def delete(self, path):
        self.dirs.discard(path)
        self.files.pop(path, None)

    def upload(self, src, dest):
        self._check(dest)
        self.files[dest] = bytes(src)

    def upload_dir(self, src, dest):
        files = sorted(glob.glob(src))
        for file in files:
            self.upload(Path(file).read_bytes(), posixpath.join(dest, os.path.basename(file)))
        return files

    def download(self, path):
        if path not in self.files:
            raise RemoteError("Sabre\\DAV\\Exception\\NotFound", path, 404)
        return self.files[path]

    def exists(self, path):
        return path in self.files or path in self.dirs

    def create_group_folder(self, mount_point):
        return ShareResult(status="ok", status_code=100, id=1)

    def add_group_to_group_folder(self, group, folder_id):
        return ShareResult(status="ok", status_code=100)

    def set_group_permissions_for_group_folder(self, permissions, group, folder_id):
        return ShareResult(status="ok", status_code=100)

    def create_share(self, path, share_type, public_upload, permissions):
        share_id = self._next_id
        self._next_id += 1
        url = f"https://cloud.example.com/s/share{share_id}"
        self.shares[share_id] = (path, ShareElement(share_id, url, permissions))
        return ShareResult(status="ok", status_code=200, id=share_id, url=url, permissions=permissions)

    def get_share(self, path):
        elements = [el for p, el in self.shares.values() if p == path]
        return ShareResult(status="ok", status_code=200, elements=elements)

    def delete_share(self, share_id):
        self.shares.pop(share_id)
        return ShareResult(status="ok", status_code=200)

    def _narrow(self, path, permissions):
        created = self.create_share(path, 3, "true", 4)
        self.shares[created.id][1].permissions = permissions
        created.permissions = permissions
        return created

    def create_file_drop_share(self, path):
        return self._narrow(path, 4)

    def create_read_only_share(self, path):
        return self._narrow(path, 1)


@pytest.fixture()
def client():
    return NextcloudClient("https://cloud.example.com/", "admin", "password")


@pytest.fixture()
def memory_storage():
    return InMemoryStorage()
