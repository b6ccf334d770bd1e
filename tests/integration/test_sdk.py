# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the public SDK interface."""

from __future__ import annotations

import pytest

from qlscan import load_results, load_results_sync, scan_workspace, scan_workspace_sync


@pytest.fixture
def sdk_env(monkeypatch, tmp_path, fake_cli, fixed_git):
    monkeypatch.setenv("QLSCAN_HOME_DIR", str(tmp_path / "home"))
    monkeypatch.setenv("QLSCAN_REPO_OWNER", "acme")
    monkeypatch.setenv("QLSCAN_REPO_NAME", "webapp")
    monkeypatch.setattr("qlscan.scanner.pipeline.CodeQLCli", lambda settings: fake_cli)
    return fake_cli


class TestScanWorkspace:
    async def test_scan_then_load(self, sdk_env, workspace):
        snapshots = []
        findings = await scan_workspace(
            workspace, languages=["ts", "py"], on_results=snapshots.append
        )
        assert len(findings) == 6
        assert [len(s) for s in snapshots] == [2, 6]

        loaded = await load_results(workspace, languages=["javascript", "python"])
        assert loaded == findings


class TestSyncWrappers:
    def test_scan_workspace_sync(self, sdk_env, workspace):
        findings = scan_workspace_sync(workspace, languages=["python"])
        assert {f.language for f in findings} == {"python"}

    def test_load_results_sync_without_results(self, sdk_env, workspace):
        assert load_results_sync(str(workspace), languages=["go"]) == []
