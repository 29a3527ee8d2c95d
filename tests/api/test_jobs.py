"""Tests for job and build endpoints and their response parsers."""

import httpx
import pytest

from jenkins_sdk.api import jobs
from jenkins_sdk.transport import Response
from jenkins_sdk.url import BaseUrl

BASE = BaseUrl.parse("https://ci.example.com/jenkins")


def url_of(endpoint) -> httpx.URL:
    return httpx.URL(endpoint.prepare(BASE).url)


def make_response(body: bytes = b"", **headers: str) -> Response:
    return Response(200, httpx.Headers(headers), body)


# ---------------------------------------------------------------------------
# Job paths
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("job", "expected"),
    [
        ("demo", ["job", "demo"]),
        ("folder/demo", ["job", "folder", "job", "demo"]),
        ("/folder//demo/", ["job", "folder", "job", "demo"]),
    ],
)
def test_job_segments(job, expected):
    """Folder paths expand to nested job segments."""
    assert jobs.job_segments(job) == expected


def test_job_segments_rejects_empty_path():
    """A path with no job name is a programming error."""
    with pytest.raises(ValueError, match="Invalid job path"):
        jobs.job_segments("//")


def test_job_name_with_space_is_encoded():
    """Job names are percent-encoded as single segments."""
    url = url_of(jobs.get("my job"))

    assert url.raw_path == b"/jenkins/job/my%20job/api/json"


def test_folder_job_build_url():
    """Builds of jobs inside folders address the nested path."""
    url = url_of(jobs.build_info("team/app", 42))

    assert url.path == "/jenkins/job/team/job/app/42/api/json"


def test_list_jobs_uses_tree_filter():
    """The job listing requests only the summary fields."""
    assert url_of(jobs.list_jobs()).params["tree"] == "jobs[name,url,color]"


def test_get_with_tree():
    """A tree filter is passed through as a query parameter."""
    url = url_of(jobs.get("demo", tree="builds[number]"))

    assert url.params["tree"] == "builds[number]"


@pytest.mark.parametrize(
    ("factory", "selector"),
    [
        (jobs.last_build, "lastBuild"),
        (jobs.last_completed_build, "lastCompletedBuild"),
        (jobs.last_successful_build, "lastSuccessfulBuild"),
        (jobs.last_failed_build, "lastFailedBuild"),
        (jobs.last_stable_build, "lastStableBuild"),
        (jobs.last_unstable_build, "lastUnstableBuild"),
        (jobs.last_unsuccessful_build, "lastUnsuccessfulBuild"),
    ],
)
def test_build_permalinks(factory, selector):
    """Each permalink helper addresses its selector."""
    assert url_of(factory("demo")).path == f"/jenkins/job/demo/{selector}/api/json"


# ---------------------------------------------------------------------------
# Job management
# ---------------------------------------------------------------------------


def test_copy_query_order():
    """Copying a job sends name, mode and source in order."""
    url = url_of(jobs.copy("template", "new-job"))

    assert url.path == "/jenkins/createItem"
    assert url.params.multi_items() == [
        ("name", "new-job"),
        ("mode", "copy"),
        ("from", "template"),
    ]


def test_create_from_xml_sends_xml_body():
    """Job creation posts the config document as XML."""
    request = jobs.create_from_xml("demo", "<project/>").prepare(BASE)

    assert request.method == "POST"
    assert request.body.content == b"<project/>"
    assert request.body.content_type == "application/xml"


def test_rename_uses_new_name_query():
    url = url_of(jobs.rename("old", "new"))

    assert url.path == "/jenkins/job/old/doRename"
    assert url.params["newName"] == "new"


def test_set_description_is_a_form():
    """Descriptions are submitted as form fields."""
    endpoint = jobs.set_description("demo", "nightly build")

    assert endpoint.form == (("description", "nightly build"),)


def test_build_with_parameters_form():
    """Parameters are posted as form fields in order."""
    endpoint = jobs.build_with_parameters("demo", [("A", 1), ("B", "x")])

    assert endpoint.method == "POST"
    assert endpoint.segments[-1] == "buildWithParameters"
    assert endpoint.form == (("A", "1"), ("B", "x"))


def test_artifact_path_segments():
    """Artifact paths keep their directory structure."""
    url = url_of(jobs.artifact("demo", 3, "dist/app.tar.gz"))

    assert url.path == "/jenkins/job/demo/3/artifact/dist/app.tar.gz"


def test_artifact_rejects_empty_path():
    with pytest.raises(ValueError, match="Invalid artifact path"):
        jobs.artifact("demo", 3, "/")


@pytest.mark.parametrize(
    ("factory", "action"),
    [
        (jobs.stop_build, "stop"),
        (jobs.term_build, "term"),
        (jobs.kill_build, "kill"),
        (jobs.delete_build, "doDelete"),
        (jobs.toggle_keep_build, "toggleLogKeep"),
    ],
)
def test_build_actions_are_posts(factory, action):
    """Build actions POST to the build's action URL."""
    endpoint = factory("demo", 5)

    assert endpoint.method == "POST"
    assert url_of(endpoint).path == f"/jenkins/job/demo/5/{action}"


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("location", "expected"),
    [
        ("https://ci.example.com/jenkins/queue/item/42/", 42),
        ("/queue/item/7", 7),
        ("https://ci.example.com/queue/item/abc/", None),
        ("https://ci.example.com/job/demo/", None),
    ],
)
def test_queue_item_id_from_location(location, expected):
    """The queue item id is the segment after ``item``."""
    assert jobs.queue_item_id_from_location(location) == expected


def test_parse_triggered_build():
    """A 201 Location header yields the queue item."""
    response = make_response(Location="https://ci/queue/item/9/")

    result = jobs.parse_triggered_build(response)

    assert result.location == "https://ci/queue/item/9/"
    assert result.queue_item_id == 9


def test_parse_triggered_build_without_location():
    """Missing Location headers leave both fields empty."""
    result = jobs.parse_triggered_build(make_response())

    assert result.location is None
    assert result.queue_item_id is None


def test_progressive_console_text_start():
    """The start offset is sent as a query parameter."""
    url = url_of(jobs.progressive_console_text("demo", 4, start=1024))

    assert url.path == "/jenkins/job/demo/4/logText/progressiveText"
    assert url.params["start"] == "1024"


def test_parse_progressive_text_headers():
    """Paging headers are decoded into the next offset and more flag."""
    response = make_response(
        b"line 1\n",
        **{"X-Text-Size": "7", "X-More-Data": "true"},
    )

    result = jobs.parse_progressive_text(response)

    assert result.text == "line 1\n"
    assert result.next_start == 7
    assert result.more_data is True


def test_parse_progressive_text_last_chunk():
    """Without X-More-Data the log is complete."""
    result = jobs.parse_progressive_text(make_response(b"done", **{"X-Text-Size": "4"}))

    assert result.more_data is False
