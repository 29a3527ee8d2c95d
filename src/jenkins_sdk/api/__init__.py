"""Endpoint catalog for the Jenkins REST API.

Each module groups the operations of one resource as functions returning
:class:`~jenkins_sdk.endpoint.Endpoint` values. The same descriptors work
with the blocking and the async client:

    from jenkins_sdk.api import jobs

    client.request(jobs.build_with_parameters("folder/demo", {"BRANCH": "main"}))

Exports:
    system: Instance info, load, crumb issuer, lifecycle actions.
    jobs: Jobs, builds, console output and artifacts.
    queue: Build queue.
    computers: Agents and executors.
    views: Views and their job membership.
    users: User records and the current identity.
    people: People directory.
"""

from . import computers, jobs, people, queue, system, users, views

__all__ = ["computers", "jobs", "people", "queue", "system", "users", "views"]
