"""Tests for the kubepair command line entry point."""

from __future__ import annotations

import json

import pytest

import stress.run as cli
from kubepair.exceptions import BackendError
from stress.fixtures.memory_backend import MemoryBackend

FAST = ["--backend", "memory", "--poll-interval", "10ms", "--max-stagger", "0", "--log-level", "WARNING"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ("KUBEPAIR_COUNT", "KUBEPAIR_STORAGE_CLASS", "KUBEPAIR_PREFIX", "KUBEPAIR_NAMESPACE", "KUBECONFIG"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


class TestMainSuccess:
    def test_provision_writes_report(self, tmp_path):
        output = tmp_path / "out" / "report.json"

        code = cli.main(["provision", "--count", "2", "--prefix", "cli", "--output", str(output), *FAST])

        assert code == 0
        report = json.loads(output.read_text())
        assert report["success"] is True
        assert report["config"]["count"] == 2
        assert [r["name"] for r in report["result"]["compute_units"]] == ["cli-0001", "cli-0002"]

    def test_stdout_without_file(self, tmp_path, capsys):
        code = cli.main(["decommission", "--count", "1", "--no-output", "--stdout", *FAST])

        assert code == 0
        assert not (tmp_path / "kubepair.json").exists()
        report = json.loads(capsys.readouterr().out)
        assert report["config"]["mode"] == "decommission"
        assert report["result"]["error_counts"] == {"NOT_FOUND": 2}

    def test_default_output_file(self, tmp_path):
        assert cli.main(["provision", "--count", "1", *FAST]) == 0
        assert (tmp_path / "kubepair.json").exists()

    def test_kubernetes_backend_uses_kubeconfig(self, monkeypatch, tmp_path):
        from kubepair.backend import kubernetes as kube_backend

        seen = {}

        def fake_from_kubeconfig(kubeconfig=None, **kwargs):
            seen["kubeconfig"] = kubeconfig
            return MemoryBackend()

        monkeypatch.setattr(kube_backend.KubernetesBackend, "from_kubeconfig", staticmethod(fake_from_kubeconfig))

        code = cli.main(
            [
                "provision",
                "--count",
                "1",
                "--storage-class",
                "standard",
                "--kubeconfig",
                "/tmp/kubeconfig",
                "--poll-interval",
                "10ms",
                "--max-stagger",
                "0",
                "--no-output",
            ]
        )

        assert code == 0
        assert seen["kubeconfig"] == "/tmp/kubeconfig"


class TestMainFailure:
    def test_fatal_run_exits_1_and_reports(self, monkeypatch, tmp_path):
        backend = MemoryBackend()
        backend.inject_failure("create_compute_unit", "fail-0001", BackendError("forbidden", status=403))
        monkeypatch.setattr(cli, "_build_backend", lambda args: backend)
        output = tmp_path / "failed.json"

        code = cli.main(
            ["provision", "--count", "1", "--prefix", "fail", "--poll-timeout", "1s", "--output", str(output), *FAST]
        )

        assert code == 1
        report = json.loads(output.read_text())
        assert report["success"] is False
        assert report["error"]["cause"]["error_code"] == "BACKEND"
        assert report["result"]["workflows_completed"] == 2

    @pytest.mark.parametrize(
        "argv",
        [
            ["provision", "--count", "0"],
            ["provision", "--count", "-2"],
            ["provision", "--poll-interval", "soon"],
            ["provision", "--prefix", "Not_Valid"],
            ["provision", "--poll-interval", "0s"],
        ],
    )
    def test_invalid_arguments_exit_2(self, argv, tmp_path):
        assert cli.main([*FAST, *argv]) == 2
        assert not (tmp_path / "kubepair.json").exists()

    def test_kubernetes_backend_requires_storage_class(self):
        assert cli.main(["provision", "--count", "1", "--no-output"]) == 2

    def test_invalid_environment_exit_2(self, monkeypatch):
        monkeypatch.setenv("KUBEPAIR_COUNT", "many")
        assert cli.main(["provision", *FAST]) == 2

    def test_unknown_mode_is_rejected_by_parser(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["scale", *FAST])
        assert exc_info.value.code == 2


class TestSettingsDefaults:
    def test_env_supplies_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("KUBEPAIR_COUNT", "2")
        monkeypatch.setenv("KUBEPAIR_PREFIX", "envp")

        assert cli.main(["provision", "--output", str(tmp_path / "r.json"), *FAST]) == 0
        report = json.loads((tmp_path / "r.json").read_text())
        assert report["config"]["prefix"] == "envp"
        assert report["config"]["count"] == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--version"])
        assert exc_info.value.code == 0
        assert "kubepair" in capsys.readouterr().out
