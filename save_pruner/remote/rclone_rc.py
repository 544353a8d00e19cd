"""rclone remote-control backend — talks to a running ``rclone rcd`` over HTTP."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from save_pruner.models.backup_file import RemoteEntry
from save_pruner.remote.base import RemoteError, RemoteStorage, join_path
from save_pruner.remote.rclone_cli import entries_from_lsjson


def split_remote(remote: str) -> tuple[str, str]:
    """Split ``"gdrive:saves/ludusavi"`` into ``("gdrive:", "saves/ludusavi")``.

    Local paths without a remote prefix are passed through as ``fs``.
    """
    if ":" in remote:
        fs, _, rest = remote.partition(":")
        return f"{fs}:", rest.strip("/")
    return remote, ""


class RcloneRc(RemoteStorage):
    """Remote storage via the rclone rc API (``operations/list``, ``operations/deletefile``)."""

    def __init__(
        self,
        remote: str,
        url: str = "http://localhost:5572",
        user: str = "",
        password: str = "",
        timeout: float = 60,
        client: httpx.Client | None = None,
    ) -> None:
        self._fs, self._base = split_remote(remote)
        auth = (user, password) if user else None
        self._client = client or httpx.Client(base_url=url.rstrip("/"), auth=auth, timeout=timeout)

    @property
    def name(self) -> str:
        return "rc"

    def close(self) -> None:
        self._client.close()

    def _call(self, command: str, body: dict[str, Any]) -> dict[str, Any]:
        logger.debug(f"rc {command}: {body}")
        try:
            resp = self._client.post(f"/{command}", json=body)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            try:
                detail = e.response.json().get("error", "")
            except ValueError:
                detail = ""
            detail = detail or e.response.text.strip() or str(e)
            raise RemoteError(f"rc {command} failed ({e.response.status_code}): {detail}") from e
        except httpx.HTTPError as e:
            raise RemoteError(f"rc {command} failed: {e}") from e
        except ValueError as e:
            raise RemoteError(f"rc {command} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise RemoteError(f"rc {command} returned unexpected payload")
        return data

    def list(self, path: str) -> list[RemoteEntry]:
        data = self._call("operations/list", {"fs": self._fs, "remote": join_path(self._base, path)})
        items = data.get("list", [])
        if not isinstance(items, list):
            raise RemoteError("rc operations/list returned unexpected payload")
        return entries_from_lsjson(items)

    def delete(self, path: str) -> None:
        self._call("operations/deletefile", {"fs": self._fs, "remote": join_path(self._base, path)})
