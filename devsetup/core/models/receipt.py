"""
InstallReceipt — the result of one installer run.

Installers return receipts, never exceptions.  The orchestrator
inspects the status to decide what to record and report.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class InstallReceipt(BaseModel):
    """Outcome of installing (or previewing) a single component."""

    component: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    version: str | None = None
    output: str = ""
    error: str | None = None

    # Non-critical step failures that were logged and tolerated
    warnings: list[str] = Field(default_factory=list)

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the install succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the install failed."""
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        component: str,
        version: str | None = None,
        output: str = "",
        **kwargs: Any,
    ) -> InstallReceipt:
        """Create a success receipt."""
        return cls(
            component=component,
            status="ok",
            version=version,
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        component: str,
        error: str,
        **kwargs: Any,
    ) -> InstallReceipt:
        """Create a failure receipt."""
        return cls(
            component=component,
            status="failed",
            error=error,
            **kwargs,
        )

    @classmethod
    def skip(
        cls,
        component: str,
        reason: str = "",
        **kwargs: Any,
    ) -> InstallReceipt:
        """Create a skip receipt."""
        return cls(
            component=component,
            status="skipped",
            output=reason,
            **kwargs,
        )
