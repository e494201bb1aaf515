"""
Tests for the provisioning pipeline.
"""

import httpx
import pytest

from bootcheck.errors import InstallError
from bootcheck.models import OutcomeStatus, RunConfig
from bootcheck.provision import Provisioner, build_provisioning_pipeline, download_install_script

from fakes import FakeProbe, FakeRunner


@pytest.fixture
def template(project_root):
    path = project_root / ".env.example"
    path.write_text("API_KEY=\nDEBUG=false\n")
    return path


def _provisioner(config, runner=None, probe=None, follow=False, followed=None, script="echo install", fetch=None):
    def follower(path):
        if followed is not None:
            followed.append(path)

    return Provisioner(
        config,
        RunConfig(follow_logs=follow),
        runner=runner or FakeRunner(),
        probe=probe or FakeProbe(),
        fetch_script=fetch or (lambda url: script),
        follower=follower,
    )


def _run(config, **kwargs):
    provisioner = _provisioner(config, **kwargs)
    return build_provisioning_pipeline(config, provisioner.run_config, provisioner).run()


class TestPackageManager:

    def test_already_installed_skips_install(self, config, runner):
        outcome = _provisioner(config, runner=runner).ensure_package_manager()
        assert outcome.status == OutcomeStatus.SUCCESS
        assert "uv 0.4.0" in outcome.message
        assert runner.calls == []

    def test_installs_when_missing(self, config, runner):
        probe = FakeProbe(available=[False, True])
        outcome = _provisioner(config, runner=runner, probe=probe, script="#!/bin/sh\n").ensure_package_manager()
        assert outcome.ok
        assert "installed successfully" in outcome.message
        assert runner.calls == [{"argv": ["sh"], "capture": False, "input_text": "#!/bin/sh\n"}]

    def test_installer_failure_is_fatal(self, config):
        probe = FakeProbe(available=[False])
        runner = FakeRunner({"sh": 3})
        with pytest.raises(InstallError) as excinfo:
            _provisioner(config, runner=runner, probe=probe).ensure_package_manager()
        assert excinfo.value.exit_code == 3

    def test_still_missing_after_install(self, config):
        probe = FakeProbe(available=[False, False])
        with pytest.raises(InstallError, match="still not on PATH"):
            _provisioner(config, probe=probe).ensure_package_manager()

    def test_failed_download_aborts_before_sync(self, config, runner, template):
        def fetch(url):
            raise InstallError(f"Failed to download installer from {url}: connection refused")

        result = _run(config, runner=runner, probe=FakeProbe(available=[False]), fetch=fetch)
        assert result.step_names == ["package-manager"]
        assert result.halted_at == "package-manager"
        assert result.exit_code != 0
        assert "Failed to download installer" in result.outcome_of("package-manager").message
        assert runner.calls == []
        assert not config.env_path.exists()


class TestDownloadInstallScript:

    URL = "https://example.test/install.sh"

    def test_returns_script_text(self, monkeypatch):
        response = httpx.Response(200, text="#!/bin/sh\necho ok\n", request=httpx.Request("GET", self.URL))
        monkeypatch.setattr("bootcheck.provision.httpx.get", lambda url, **kwargs: response)
        assert download_install_script(self.URL) == "#!/bin/sh\necho ok\n"

    def test_connection_error(self, monkeypatch):
        def get(url, **kwargs):
            raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))

        monkeypatch.setattr("bootcheck.provision.httpx.get", get)
        with pytest.raises(InstallError, match="Failed to download installer"):
            download_install_script(self.URL)

    def test_http_error_status(self, monkeypatch):
        response = httpx.Response(404, request=httpx.Request("GET", self.URL))
        monkeypatch.setattr("bootcheck.provision.httpx.get", lambda url, **kwargs: response)
        with pytest.raises(InstallError, match="404"):
            download_install_script(self.URL)


class TestDependencySync:

    def test_syncs_all_extras(self, config, runner):
        outcome = _provisioner(config, runner=runner).sync_dependencies()
        assert outcome.ok
        assert runner.argvs == [["uv", "sync", "--all-extras"]]
        # Output is not captured so the tool's own errors reach the user
        assert runner.calls[0]["capture"] is False

    def test_failure_aborts_before_config(self, config, template):
        runner = FakeRunner({"sync": 2})
        result = _run(config, runner=runner)
        assert result.halted_at == "dependencies"
        assert result.step_names == ["package-manager", "dependencies"]
        assert result.exit_code == 2
        assert not config.env_path.exists()


class TestConfigFile:

    def test_created_from_template(self, config, template, capsys):
        result = _run(config)
        assert result.ok
        assert config.env_path.read_text() == template.read_text()
        outcome = result.outcome_of("config-file")
        assert outcome.status == OutcomeStatus.SUCCESS
        assert any("edit .env" in w for w in outcome.warnings)
        assert "Please edit .env" in capsys.readouterr().err

    def test_missing_template_aborts_before_logs(self, config):
        result = _run(config)
        assert result.halted_at == "config-file"
        assert "logs" not in result.step_names
        assert not config.log_dir_path.exists()
        assert ".env.example not found" in result.outcome_of("config-file").message
        assert result.exit_code != 0

    def test_existing_config_is_never_overwritten(self, config, template):
        config.env_path.write_text("API_KEY=secret\n")
        outcome = _provisioner(config).materialize_config()
        assert outcome.status == OutcomeStatus.SKIPPED
        assert config.env_path.read_text() == "API_KEY=secret\n"

    def test_existing_config_without_template_is_fine(self, config):
        config.env_path.write_text("API_KEY=secret\n")
        assert _provisioner(config).materialize_config().status == OutcomeStatus.SKIPPED


class TestLogs:

    def test_creates_directory_and_files(self, config):
        outcome = _provisioner(config).prepare_logs()
        assert outcome.status == OutcomeStatus.SUCCESS
        assert config.log_dir_path.is_dir()
        assert config.log_file_path.read_text() == ""
        assert config.activity_log_path.read_text() == ""

    def test_existing_log_content_untouched(self, config):
        config.log_dir_path.mkdir()
        config.log_file_path.write_bytes(b"2024-01-01 started\n\x00partial")
        outcome = _provisioner(config).prepare_logs()
        assert outcome.status == OutcomeStatus.SUCCESS
        assert "mcp_activity.log" in outcome.message
        assert config.log_file_path.read_bytes() == b"2024-01-01 started\n\x00partial"

    def test_log_dir_blocked_by_file_fails(self, config, template):
        config.log_dir_path.write_text("not a directory")
        result = _run(config)
        assert result.halted_at == "logs"


class TestFollow:

    def test_follow_blocks_on_primary_log(self, config, template):
        followed = []
        result = _run(config, follow=True, followed=followed)
        assert result.ok
        assert followed == [config.log_file_path]
        assert result.step_names[-1] == "follow"

    def test_without_flag_prints_guidance(self, config, template, capsys):
        followed = []
        result = _run(config, followed=followed)
        assert followed == []
        assert result.outcome_of("follow").status == OutcomeStatus.SKIPPED
        assert "bootcheck setup -f" in capsys.readouterr().err

    def test_interrupt_while_following_propagates(self, config, template):
        def follower(path):
            raise KeyboardInterrupt

        provisioner = Provisioner(
            config,
            RunConfig(follow_logs=True),
            runner=FakeRunner(),
            probe=FakeProbe(),
            follower=follower,
        )
        with pytest.raises(KeyboardInterrupt):
            build_provisioning_pipeline(config, provisioner.run_config, provisioner).run()


class TestIdempotence:

    def test_second_run_reports_already_exists(self, config, template):
        first = _run(config)
        assert first.ok
        config.env_path.write_text("API_KEY=edited\n")
        config.log_file_path.write_text("server started\n")

        second = _run(config)
        assert second.ok
        assert second.outcome_of("config-file").status == OutcomeStatus.SKIPPED
        assert second.outcome_of("logs").status == OutcomeStatus.SKIPPED
        assert config.env_path.read_text() == "API_KEY=edited\n"
        assert config.log_file_path.read_text() == "server started\n"

    def test_summary_lists_next_steps(self, config, template):
        outcome = _run(config).outcome_of("summary")
        assert outcome.message == "Setup complete!"
        assert any("uv run python server.py" in h for h in outcome.hints)
