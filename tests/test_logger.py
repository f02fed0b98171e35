"""
Tests for run logging.
"""

import json
import logging
import shutil

from webvision.logger import RunLogger, redact_args


class TestRedaction:
    """Tests for argument redaction."""

    def test_password_fields_are_redacted(self):
        args = {"selector": "#password", "text": "hunter2"}
        assert redact_args("fill_form", args)["text"] == "[REDACTED]"
        assert args["text"] == "hunter2"

    def test_other_fields_are_kept(self):
        args = {"selector": "#email", "text": "a@b.c"}
        assert redact_args("fill_form", args) == args


class TestRunLogger:
    """Tests for the JSONL step log."""

    def test_run_directory_is_named_after_task(self, tmp_path):
        run_log = RunLogger("Open example.com", runs_dir=tmp_path)

        assert run_log.run_dir.parent == tmp_path
        assert run_log.run_dir.name.endswith("_open_examplecom")
        assert run_log.steps_file.exists()

    def test_steps_are_appended(self, tmp_path):
        run_log = RunLogger("task", runs_dir=tmp_path)
        run_log.log_step("open_url", {"url": "example.com"}, {"success": True, "message": "ok"})
        run_log.log_step("fill_form", {"selector": "input[type=password]", "text": "s3cret"},
                         {"success": True, "message": "filled"})

        lines = run_log.steps_file.read_text(encoding="utf-8").splitlines()
        steps = [json.loads(line) for line in lines]

        assert [s["step"] for s in steps] == [1, 2]
        assert steps[0]["tool"] == "open_url"
        assert steps[1]["args"]["text"] == "[REDACTED]"

    def test_default_location(self, isolated_home):
        run_log = RunLogger("task")
        assert run_log.run_dir.parent == isolated_home / "runs"

    def test_write_failure_disables_logging(self, tmp_path, caplog):
        run_log = RunLogger("task", runs_dir=tmp_path)
        shutil.rmtree(run_log.run_dir)

        with caplog.at_level(logging.WARNING, logger="webvision.logger"):
            run_log.log_step("open_url", {"url": "example.com"}, {"success": True, "message": "ok"})
            run_log.log_step("press_key", {"key": "Enter"}, {"success": True, "message": "ok"})

        assert run_log.enabled is False
        assert run_log.step_count == 1
        assert "Run log disabled" in caplog.text
        assert not run_log.run_dir.exists()
