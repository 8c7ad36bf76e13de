"""Tests for the task runner."""

import logging
from unittest.mock import Mock

import pytest

from springcm_upload.delivery.mapping import Filter, PathMapping, Task
from springcm_upload.delivery.runner import TaskReport, TaskRunner
from springcm_upload.exceptions import (
    AuthenticationError,
    DeliveryFailedError,
    PatternError,
    UploadError,
)


def make_mapping(local, remote="/Admin/Inbound"):
    return PathMapping(
        remote=remote,
        local=local,
        trigger="**/*.trigger",
        filter=Filter(include=["*.pdf"]),
    )


def add_delivery(root, name):
    directory = root / name
    directory.mkdir(parents=True)
    (directory / "ready.trigger").write_text("")
    (directory / f"{name}.pdf").write_text("pdf")
    return directory


@pytest.fixture
def runner(mock_client):
    factory = Mock(return_value=mock_client)
    return TaskRunner(client_factory=factory)


class TestRun:
    """Tests for TaskRunner.run()."""

    def test_connects_runs_and_disconnects(
        self, runner, mock_client, credentials, temp_dir
    ):
        add_delivery(temp_dir, "a")
        task = Task(auth=credentials, paths=[make_mapping(temp_dir)])

        report = runner.run(task)

        runner.client_factory.assert_called_once_with(credentials)
        mock_client.connect.assert_called_once_with()
        mock_client.close.assert_called_once_with()
        assert report.ok
        assert report.delivered == 1
        assert report.files_uploaded == 1

    def test_connection_failure_stops_run(
        self, runner, mock_client, credentials, temp_dir
    ):
        add_delivery(temp_dir, "a")
        mock_client.connect.side_effect = AuthenticationError("bad credentials")
        task = Task(auth=credentials, paths=[make_mapping(temp_dir)])

        with pytest.raises(AuthenticationError):
            runner.run(task)

        mock_client.get_folder.assert_not_called()
        mock_client.upload_document.assert_not_called()
        assert (temp_dir / "a" / "ready.trigger").exists()

    def test_mappings_run_in_order(self, runner, mock_client, credentials, temp_dir):
        add_delivery(temp_dir / "one", "a")
        add_delivery(temp_dir / "two", "b")
        task = Task(
            auth=credentials,
            paths=[
                make_mapping(temp_dir / "two", remote="/Two"),
                make_mapping(temp_dir / "one", remote="/One"),
            ],
        )

        report = runner.run(task)

        folders = [c.args[0] for c in mock_client.get_folder.call_args_list]
        assert folders == ["/Two", "/One"]
        assert [m.delivered for m in report.mappings] == [1, 1]

    def test_error_aborts_remaining_mappings(
        self, runner, mock_client, credentials, temp_dir
    ):
        add_delivery(temp_dir / "later", "b")
        task = Task(
            auth=credentials,
            paths=[
                make_mapping(temp_dir / "missing"),
                make_mapping(temp_dir / "later"),
            ],
        )

        with pytest.raises(PatternError):
            runner.run(task)

        mock_client.upload_document.assert_not_called()
        mock_client.close.assert_called_once_with()
        assert (temp_dir / "later" / "b" / "ready.trigger").exists()

    def test_upload_error_aborts_remaining_mappings(
        self, runner, mock_client, credentials, temp_dir
    ):
        add_delivery(temp_dir / "first", "a")
        add_delivery(temp_dir / "later", "b")
        mock_client.upload_document.side_effect = UploadError("boom")
        task = Task(
            auth=credentials,
            paths=[make_mapping(temp_dir / "first"), make_mapping(temp_dir / "later")],
        )

        with pytest.raises(UploadError):
            runner.run(task)

        assert mock_client.upload_document.call_count == 1
        assert (temp_dir / "first" / "a" / "ready.trigger").exists()
        assert (temp_dir / "later" / "b" / "ready.trigger").exists()

    def test_continue_on_error_runs_later_mappings(
        self, runner, mock_client, credentials, temp_dir
    ):
        add_delivery(temp_dir / "later", "b")
        task = Task(
            auth=credentials,
            paths=[
                make_mapping(temp_dir / "missing"),
                make_mapping(temp_dir / "later"),
            ],
            continue_on_error=True,
        )
        report = TaskReport()

        with pytest.raises(DeliveryFailedError) as exc_info:
            runner.run(task, report)

        assert len(exc_info.value.errors) == 1
        assert isinstance(exc_info.value.errors[0], PatternError)
        assert not (temp_dir / "later" / "b" / "ready.trigger").exists()
        assert [m.delivered for m in report.mappings] == [0, 1]
        mock_client.close.assert_called_once_with()

    def test_runner_policy_overrides_task(self, mock_client, credentials, temp_dir):
        add_delivery(temp_dir / "later", "b")
        runner = TaskRunner(
            client_factory=Mock(return_value=mock_client), continue_on_error=True
        )
        task = Task(
            auth=credentials,
            paths=[
                make_mapping(temp_dir / "missing"),
                make_mapping(temp_dir / "later"),
            ],
        )

        with pytest.raises(DeliveryFailedError):
            runner.run(task)

        assert mock_client.upload_document.call_count == 1

    def test_close_failure_does_not_change_outcome(
        self, runner, mock_client, credentials, temp_dir, caplog
    ):
        add_delivery(temp_dir, "a")
        mock_client.close.side_effect = RuntimeError("socket already gone")
        task = Task(auth=credentials, paths=[make_mapping(temp_dir)])

        with caplog.at_level(logging.WARNING, logger="springcm_upload"):
            report = runner.run(task)

        assert report.ok
        mock_client.close.assert_called_once_with()
        assert "socket already gone" in caplog.text

    def test_close_failure_keeps_original_error(
        self, runner, mock_client, credentials
    ):
        mock_client.connect.side_effect = AuthenticationError("bad credentials")
        mock_client.close.side_effect = RuntimeError("close failed")
        task = Task(auth=credentials, paths=[])

        with pytest.raises(AuthenticationError):
            runner.run(task)

    def test_nothing_triggered(self, runner, mock_client, credentials, temp_dir):
        (temp_dir / "report.pdf").write_text("pdf")
        task = Task(auth=credentials, paths=[make_mapping(temp_dir)])

        report = runner.run(task)

        assert report.ok
        assert report.delivered == 0
        mock_client.get_folder.assert_not_called()
        mock_client.upload_document.assert_not_called()
        assert (temp_dir / "report.pdf").exists()

    def test_error_is_logged_once(
        self, runner, mock_client, credentials, temp_dir, caplog
    ):
        task = Task(auth=credentials, paths=[make_mapping(temp_dir / "missing")])

        with caplog.at_level(logging.ERROR, logger="springcm_upload"):
            with pytest.raises(PatternError):
                runner.run(task)

        errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert len(errors) == 1
        assert errors[0].exc_info is not None


class TestRunTasks:
    """Tests for TaskRunner.run_tasks()."""

    def test_failed_task_does_not_stop_later_tasks(self, credentials, temp_dir):
        add_delivery(temp_dir, "a")
        failing = Mock()
        failing.connect.side_effect = AuthenticationError("bad credentials")
        working = Mock()
        runner = TaskRunner(client_factory=Mock(side_effect=[failing, working]))

        reports = runner.run_tasks(
            [
                Task(auth=credentials, paths=[make_mapping(temp_dir)], name="first"),
                Task(auth=credentials, paths=[make_mapping(temp_dir)], name="second"),
            ]
        )

        assert [r.task for r in reports] == ["first", "second"]
        assert not reports[0].ok
        assert isinstance(reports[0].error, AuthenticationError)
        assert reports[1].ok
        assert reports[1].delivered == 1
        failing.close.assert_called_once_with()
        working.close.assert_called_once_with()
