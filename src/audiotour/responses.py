"""Success envelope helpers shared by all routers."""

from __future__ import annotations

from typing import Any


def envelope(data: Any = None, message: str | None = None, **extra: Any) -> dict[str, Any]:  # noqa: ANN401
    """Wrap a payload as ``{success, data?, message?, ...}``.

    Keys whose value is None are left out, so a bare ``envelope(message=...)``
    renders without a ``data`` key.
    """
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    body.update({k: v for k, v in extra.items() if v is not None})
    return body
