"""Access control list of a spreadsheet file (Drive v3 permissions).

Example:
    >>> acl = spreadsheet.acl
    >>> # A specific user can write.
    >>> acl.push("user", "writer", scope="someone@example.com")
    >>> # Anyone who knows the link can read.
    >>> acl.push("default", "reader", with_key=True)
    >>> acl.delete(acl[1])
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from sheetgrid.config import DRIVE_API_BASE
from sheetgrid.exceptions import MalformedResponseError
from sheetgrid.transport import Transport

PERMISSION_FIELDS = "id,type,role,emailAddress,domain,allowFileDiscovery"


@dataclass
class AclEntry:
    """A single permission on a file."""

    id: str
    type: str  # user, group, domain or anyone
    role: str  # owner, organizer, fileOrganizer, writer, commenter or reader
    email_address: str | None = None
    domain: str | None = None
    allow_file_discovery: bool | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def scope_type(self) -> str:
        """Scope type, with "anyone" reported as "default"."""
        return "default" if self.type == "anyone" else self.type

    @property
    def scope(self) -> str | None:
        """Email address for user/group entries, domain for domain entries."""
        if self.type in ("user", "group"):
            return self.email_address
        if self.type == "domain":
            return self.domain
        return None

    @property
    def with_key(self) -> bool | None:
        if self.allow_file_discovery is None:
            return None
        return not self.allow_file_discovery


class Acl:
    """List of permissions of one file, loaded on first access.

    Supports len(), indexing and iteration like a read-only list. Mutations
    go through push(), delete() and update_role(), which take effect
    immediately.
    """

    def __init__(
        self,
        transport: Transport,
        file_id: str,
        *,
        drive_api_base: str = DRIVE_API_BASE,
    ) -> None:
        self._transport = transport
        self._file_id = file_id
        self._api_base = drive_api_base.rstrip("/")
        self._entries: list[AclEntry] | None = None

    @property
    def permissions_url(self) -> str:
        return f"{self._api_base}/files/{self._file_id}/permissions"

    def _permission_url(self, permission_id: str) -> str:
        return f"{self.permissions_url}/{permission_id}"

    @property
    def entries(self) -> list[AclEntry]:
        if self._entries is None:
            self.reload()
        assert self._entries is not None
        return self._entries

    def reload(self) -> None:
        """Fetch the permission list from the server."""
        response = self._transport.request(
            "GET",
            self.permissions_url,
            params={"fields": f"permissions({PERMISSION_FIELDS})"},
        )
        permissions = response.get("permissions")
        if not isinstance(permissions, list):
            raise MalformedResponseError("permission list has no 'permissions' list")
        self._entries = [parse_permission(p) for p in permissions]

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> AclEntry:
        return self.entries[index]

    def __iter__(self) -> Iterator[AclEntry]:
        return iter(self.entries)

    def push(
        self,
        scope_type: str,
        role: str,
        *,
        scope: str | None = None,
        with_key: bool | None = None,
        notify: bool = True,
    ) -> AclEntry:
        """Add a new permission.

        NOTE: With notify=True Drive sends an email to the new people.

        Args:
            scope_type: "user", "group", "domain", or "default" for anyone
            role: e.g. "reader", "commenter" or "writer"
            scope: Email address (user/group) or domain name (domain)
            with_key: For domain/anyone entries, True means only people with
                the link can find the file
            notify: Whether Drive sends a notification email

        Returns:
            The created entry
        """
        body = build_permission(scope_type, role, scope=scope, with_key=with_key)
        params: dict[str, Any] = {"fields": PERMISSION_FIELDS}
        if body["type"] in ("user", "group"):
            params["sendNotificationEmail"] = "true" if notify else "false"
        response = self._transport.request(
            "POST", self.permissions_url, params=params, json=body
        )
        entry = parse_permission(response)
        # An unloaded list picks the new entry up on its first fetch.
        if self._entries is not None:
            self._entries.append(entry)
        logger.debug("Added {} permission {} on {}", entry.role, entry.id, self._file_id)
        return entry

    def delete(self, entry: AclEntry) -> None:
        """Remove a permission."""
        self._transport.request("DELETE", self._permission_url(entry.id))
        if self._entries is not None:
            self._entries[:] = [e for e in self._entries if e.id != entry.id]
        logger.debug("Deleted permission {} on {}", entry.id, self._file_id)

    def update_role(self, entry: AclEntry, role: str) -> AclEntry:
        """Change the role of an existing permission.

        The entry is updated in place from the server response.
        """
        response = self._transport.request(
            "PATCH",
            self._permission_url(entry.id),
            params={"fields": PERMISSION_FIELDS},
            json={"role": role},
        )
        updated = parse_permission(response)
        entry.role = updated.role
        entry.raw = updated.raw
        return entry

    def __repr__(self) -> str:
        return f"<{type(self).__name__} file_id={self._file_id!r} entries={self._entries!r}>"


def build_permission(
    scope_type: str,
    role: str,
    *,
    scope: str | None = None,
    with_key: bool | None = None,
) -> dict[str, Any]:
    """Translate scope_type/scope/with_key into a Drive v3 permission body."""
    permission_type = "anyone" if scope_type == "default" else scope_type
    body: dict[str, Any] = {"type": permission_type, "role": role}
    if scope is not None:
        if permission_type in ("user", "group"):
            body["emailAddress"] = scope
        elif permission_type == "domain":
            body["domain"] = scope
        else:
            raise ValueError(f"scope is not allowed for scope_type {scope_type!r}")
    if with_key is not None:
        body["allowFileDiscovery"] = not with_key
    return body


def parse_permission(permission: Any) -> AclEntry:
    if not isinstance(permission, dict):
        raise MalformedResponseError("permission is not an object")
    try:
        return AclEntry(
            id=permission["id"],
            type=permission["type"],
            role=permission["role"],
            email_address=permission.get("emailAddress"),
            domain=permission.get("domain"),
            allow_file_discovery=permission.get("allowFileDiscovery"),
            raw=permission,
        )
    except KeyError as e:
        raise MalformedResponseError(f"permission is missing {e.args[0]!r}") from e
