"""
Storage capability set and the OCS result types shared by every backend.
"""

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import DecodeError


@dataclass
class ShareElement:
    """One existing share on a path."""
    id: int
    url: str
    permissions: int = 0


@dataclass
class ShareResult:
    """Decoded <ocs><meta/><data/></ocs> envelope."""
    status: str = ""
    status_code: int = 0
    message: str = ""
    id: int = 0
    url: str = ""
    permissions: int = 0
    elements: List[ShareElement] = field(default_factory=list)


@dataclass
class RequestError:
    """Error body returned by the WebDAV server."""
    exception: str = ""
    message: str = ""


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(parent: Optional[ET.Element], name: str) -> str:
    if parent is None:
        return ""
    for child in parent:
        if _local(child.tag) == name:
            return (child.text or "").strip()
    return ""


def _child(parent: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    if parent is None:
        return None
    for child in parent:
        if _local(child.tag) == name:
            return child
    return None


def _uint(text: str, name: str) -> int:
    if not text:
        return 0
    try:
        value = int(text)
    except ValueError:
        raise DecodeError(f"invalid value for {name}: {text!r}")
    if value < 0:
        raise DecodeError(f"negative value for {name}: {value}")
    return value


def _parse(body: bytes) -> ET.Element:
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        raise DecodeError(str(e)) from e


def parse_request_error(body: bytes) -> RequestError:
    """Decode a Sabre-style <d:error> body. Namespaces are ignored."""
    root = _parse(body)
    return RequestError(
        exception=_child_text(root, "exception"),
        message=_child_text(root, "message"),
    )


def parse_share_result(body: bytes) -> ShareResult:
    """Decode an OCS envelope into a ShareResult.

    Raises DecodeError for malformed XML, a root other than <ocs>, or a
    non-numeric id / status code. Missing numbers decode as 0.
    """
    root = _parse(body)
    if _local(root.tag) != "ocs":
        raise DecodeError(f"expected element <ocs> but have <{_local(root.tag)}>")

    meta = _child(root, "meta")
    data = _child(root, "data")

    elements = []
    if data is not None:
        for el in data:
            if _local(el.tag) != "element":
                continue
            elements.append(ShareElement(
                id=_uint(_child_text(el, "id"), "element id"),
                url=_child_text(el, "url"),
                permissions=_uint(_child_text(el, "permissions"), "element permissions"),
            ))

    return ShareResult(
        status=_child_text(meta, "status"),
        status_code=_uint(_child_text(meta, "statuscode"), "statuscode"),
        message=_child_text(meta, "message"),
        id=_uint(_child_text(data, "id"), "id"),
        url=_child_text(data, "url"),
        permissions=_uint(_child_text(data, "permissions"), "permissions"),
        elements=elements,
    )


class Storage(ABC):
    """Operations callers may rely on, whatever the backend."""

    @abstractmethod
    def mkdir(self, path: str) -> None:
        """Create a remote directory."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove a remote file or directory."""

    @abstractmethod
    def upload(self, src: bytes, dest: str) -> None:
        """Write bytes to a remote path."""

    @abstractmethod
    def upload_dir(self, src: str, dest: str) -> List[str]:
        """Upload every local file matching a glob into a remote directory."""

    @abstractmethod
    def download(self, path: str) -> bytes:
        """Read a remote file."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if a remote path exists."""

    @abstractmethod
    def create_group_folder(self, mount_point: str) -> ShareResult:
        """Create a group folder mounted at mount_point."""

    @abstractmethod
    def add_group_to_group_folder(self, group: str, folder_id: int) -> ShareResult:
        """Give a group access to a group folder."""

    @abstractmethod
    def set_group_permissions_for_group_folder(self, permissions: int, group: str, folder_id: int) -> ShareResult:
        """Set the permissions a group has on a group folder."""

    @abstractmethod
    def create_share(self, path: str, share_type: int, public_upload: str, permissions: int) -> ShareResult:
        """Share a remote path."""

    @abstractmethod
    def get_share(self, path: str) -> ShareResult:
        """List the shares of a remote path."""

    @abstractmethod
    def delete_share(self, share_id: int) -> ShareResult:
        """Remove a share by id."""

    @abstractmethod
    def create_file_drop_share(self, path: str) -> ShareResult:
        """Public link share that only accepts uploads."""

    @abstractmethod
    def create_read_only_share(self, path: str) -> ShareResult:
        """Public link share that only allows reading."""
