"""Job and build endpoints.

Jobs are addressed by their full path. A job inside folders is written
``"folder/sub/job"`` and mapped to ``job/folder/job/sub/job/job``; each
name is percent-encoded separately by the client.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from ..endpoint import Endpoint, parse_bytes, parse_model, parse_none, parse_text
from ..transport import Response
from ..types import JobList, ProgressiveText, TriggeredBuild

JOB_LIST_TREE = "jobs[name,url,color]"

LAST_BUILD = "lastBuild"
LAST_COMPLETED_BUILD = "lastCompletedBuild"
LAST_SUCCESSFUL_BUILD = "lastSuccessfulBuild"
LAST_FAILED_BUILD = "lastFailedBuild"
LAST_STABLE_BUILD = "lastStableBuild"
LAST_UNSTABLE_BUILD = "lastUnstableBuild"
LAST_UNSUCCESSFUL_BUILD = "lastUnsuccessfulBuild"


def job_segments(job: str) -> list[str]:
    """Map a ``/``-separated job path to URL segments.

    Raises:
        ValueError: If the path contains no job name.
    """
    names = [name for name in job.split("/") if name]
    if not names:
        msg = f"Invalid job path: {job!r}"
        raise ValueError(msg)
    segments = []
    for name in names:
        segments.extend(("job", name))
    return segments


def _build_segments(job: str, build: int | str) -> list[str]:
    return [*job_segments(job), str(build)]


# ---------------------------------------------------------------------------
# Response parsers
# ---------------------------------------------------------------------------


def parse_progressive_text(response: Response) -> ProgressiveText:
    """Read console text plus Jenkins' paging headers."""
    size = response.headers.get("X-Text-Size", "").strip()
    more = response.headers.get("X-More-Data", "")
    return ProgressiveText(
        text=response.text,
        next_start=int(size) if size.isdigit() else None,
        more_data=more.strip().lower() == "true",
    )


def queue_item_id_from_location(location: str) -> int | None:
    """Extract ``42`` from ``https://ci/queue/item/42/``."""
    segments = [part for part in location.split("/") if part]
    try:
        candidate = segments[segments.index("item") + 1]
    except (ValueError, IndexError):
        return None
    return int(candidate) if candidate.isdigit() else None


def parse_triggered_build(response: Response) -> TriggeredBuild:
    location = response.headers.get("Location")
    return TriggeredBuild(
        location=location,
        queue_item_id=queue_item_id_from_location(location) if location else None,
    )


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


def list_jobs() -> Endpoint[JobList]:
    """Top level jobs with name, URL and status color."""
    return Endpoint.get("api", "json", parser=parse_model(JobList)).with_query(
        "tree",
        JOB_LIST_TREE,
    )


def get(job: str, tree: str | None = None) -> Endpoint[Any]:
    return Endpoint.get(*job_segments(job), "api", "json").with_tree(tree)


def set_description(job: str, description: str) -> Endpoint[None]:
    return Endpoint.post(*job_segments(job), "submitDescription").with_form(
        {"description": description},
    )


def config_xml(job: str) -> Endpoint[bytes]:
    return Endpoint.get(*job_segments(job), "config.xml", parser=parse_bytes)


def update_config_xml(job: str, xml: str | bytes) -> Endpoint[None]:
    return Endpoint.post(*job_segments(job), "config.xml").with_xml(xml)


def create_from_xml(name: str, xml: str | bytes) -> Endpoint[None]:
    """Create a top level job from a ``config.xml`` document."""
    return Endpoint.post("createItem").with_query("name", name).with_xml(xml)


def copy(source: str, name: str) -> Endpoint[None]:
    """Create job ``name`` as a copy of ``source``."""
    return (
        Endpoint.post("createItem")
        .with_query("name", name)
        .with_query("mode", "copy")
        .with_query("from", source)
    )


def delete(job: str) -> Endpoint[None]:
    return Endpoint.post(*job_segments(job), "doDelete")


def enable(job: str) -> Endpoint[None]:
    return Endpoint.post(*job_segments(job), "enable")


def disable(job: str) -> Endpoint[None]:
    return Endpoint.post(*job_segments(job), "disable")


def rename(job: str, new_name: str) -> Endpoint[None]:
    return Endpoint.post(*job_segments(job), "doRename").with_query("newName", new_name)


# ---------------------------------------------------------------------------
# Triggering
# ---------------------------------------------------------------------------


def build(job: str) -> Endpoint[TriggeredBuild]:
    return Endpoint.post(*job_segments(job), "build", parser=parse_triggered_build)


def build_with_parameters(
    job: str,
    parameters: Mapping[str, Any] | Iterable[tuple[str, Any]],
) -> Endpoint[TriggeredBuild]:
    """Trigger a parameterized build; parameters are sent as a form."""
    return Endpoint.post(
        *job_segments(job),
        "buildWithParameters",
        parser=parse_triggered_build,
    ).with_form(parameters)


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------


def build_selector(job: str, selector: str, tree: str | None = None) -> Endpoint[Any]:
    """A build addressed by number or permalink such as ``lastBuild``."""
    return Endpoint.get(*job_segments(job), selector, "api", "json").with_tree(tree)


def build_info(job: str, build: int | str, tree: str | None = None) -> Endpoint[Any]:
    return build_selector(job, str(build), tree)


def last_build(job: str, tree: str | None = None) -> Endpoint[Any]:
    return build_selector(job, LAST_BUILD, tree)


def last_completed_build(job: str, tree: str | None = None) -> Endpoint[Any]:
    return build_selector(job, LAST_COMPLETED_BUILD, tree)


def last_successful_build(job: str, tree: str | None = None) -> Endpoint[Any]:
    return build_selector(job, LAST_SUCCESSFUL_BUILD, tree)


def last_failed_build(job: str, tree: str | None = None) -> Endpoint[Any]:
    return build_selector(job, LAST_FAILED_BUILD, tree)


def last_stable_build(job: str, tree: str | None = None) -> Endpoint[Any]:
    return build_selector(job, LAST_STABLE_BUILD, tree)


def last_unstable_build(job: str, tree: str | None = None) -> Endpoint[Any]:
    return build_selector(job, LAST_UNSTABLE_BUILD, tree)


def last_unsuccessful_build(job: str, tree: str | None = None) -> Endpoint[Any]:
    return build_selector(job, LAST_UNSUCCESSFUL_BUILD, tree)


def console_text(job: str, build: int | str) -> Endpoint[str]:
    return Endpoint.get(*_build_segments(job, build), "consoleText", parser=parse_text)


def last_build_console(job: str) -> Endpoint[str]:
    return console_text(job, LAST_BUILD)


def progressive_console_text(
    job: str,
    build: int | str,
    start: int = 0,
) -> Endpoint[ProgressiveText]:
    """One chunk of console output starting at byte offset ``start``.

    Poll with ``result.next_start`` while ``result.more_data`` is true.
    """
    return Endpoint.get(
        *_build_segments(job, build),
        "logText",
        "progressiveText",
        parser=parse_progressive_text,
    ).with_query("start", start)


def artifact(job: str, build: int | str, path: str) -> Endpoint[bytes]:
    """Download an archived artifact by its relative path."""
    parts = [part for part in path.split("/") if part]
    if not parts:
        msg = f"Invalid artifact path: {path!r}"
        raise ValueError(msg)
    return Endpoint.get(
        *_build_segments(job, build),
        "artifact",
        *parts,
        parser=parse_bytes,
    )


def stop_build(job: str, build: int | str) -> Endpoint[None]:
    return Endpoint.post(*_build_segments(job, build), "stop")


def term_build(job: str, build: int | str) -> Endpoint[None]:
    return Endpoint.post(*_build_segments(job, build), "term")


def kill_build(job: str, build: int | str) -> Endpoint[None]:
    return Endpoint.post(*_build_segments(job, build), "kill")


def delete_build(job: str, build: int | str) -> Endpoint[None]:
    return Endpoint.post(*_build_segments(job, build), "doDelete")


def toggle_keep_build(job: str, build: int | str) -> Endpoint[None]:
    return Endpoint.post(*_build_segments(job, build), "toggleLogKeep")


def set_build_description(
    job: str,
    build: int | str,
    description: str,
) -> Endpoint[None]:
    return Endpoint.post(
        *_build_segments(job, build),
        "submitDescription",
        parser=parse_none,
    ).with_form({"description": description})
