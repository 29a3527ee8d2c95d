"""Typed response models for the Jenkins REST API.

Pydantic models for the handful of responses the client interprets
itself. Everything else is returned as raw JSON values, text or bytes.
Unknown fields sent by the server are ignored.
"""

from pydantic import BaseModel, ConfigDict, Field


class Crumb(BaseModel):
    """Response of ``crumbIssuer/api/json``."""

    model_config = ConfigDict(populate_by_name=True)

    crumb_request_field: str = Field(alias="crumbRequestField", min_length=1)
    crumb: str = Field(min_length=1)


class JobSummary(BaseModel):
    """One entry of the top level job listing."""

    name: str
    url: str = ""
    color: str | None = None  # absent for folders


class JobList(BaseModel):
    jobs: list[JobSummary] = []


class ExecutorsInfo(BaseModel):
    """Executor counts from ``computer/api/json``."""

    model_config = ConfigDict(populate_by_name=True)

    total_executors: int = Field(0, alias="totalExecutors")
    busy_executors: int = Field(0, alias="busyExecutors")

    @property
    def idle_executors(self) -> int:
        return max(self.total_executors - self.busy_executors, 0)


class WhoAmI(BaseModel):
    """Identity of the authenticated caller."""

    name: str = ""
    anonymous: bool = False
    authenticated: bool = False
    authorities: list[str] = []


class TriggeredBuild(BaseModel):
    """Result of triggering a build.

    Jenkins answers with ``201 Created`` and a ``Location`` header pointing
    at the queue item, e.g. ``https://ci/queue/item/42/``.
    """

    location: str | None = None
    queue_item_id: int | None = None


class ProgressiveText(BaseModel):
    """One chunk of progressively fetched console output."""

    text: str
    # Offset to pass as ``start`` for the next chunk (X-Text-Size)
    next_start: int | None = None
    # True while the build is still producing output (X-More-Data)
    more_data: bool = False
