"""Tests for vstbundle.bundle (packaging helper and manual bundle tree)."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest


def _tree(root: Path) -> list[str]:
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))


class TestPackagingHelper:
    def test_runs_xtask_bundle(self, make_config, plugin_root: Path) -> None:
        from vstbundle.bundle import run_packaging_helper

        cfg = make_config()
        with patch("vstbundle.bundle.helper.subprocess.run") as m_run:
            m_run.return_value = MagicMock(returncode=0)
            run_packaging_helper(cfg.plugin, cfg.target, {})
        (cmd,) = m_run.call_args[0]
        assert cmd == [
            "cargo",
            "xtask",
            "bundle",
            "hello_vst",
            "--release",
            "--target",
            "x86_64-pc-windows-msvc",
        ]
        assert m_run.call_args[1]["cwd"] == str(plugin_root)

    def test_nonzero_exit_raises(self, make_config) -> None:
        from vstbundle.bundle import run_packaging_helper
        from vstbundle.errors import PackagingHelperFailed

        cfg = make_config()
        with (
            patch("vstbundle.bundle.helper.subprocess.run", return_value=MagicMock(returncode=101)),
            pytest.raises(PackagingHelperFailed),
        ):
            run_packaging_helper(cfg.plugin, cfg.target, {})

    def test_missing_cargo_raises(self, make_config) -> None:
        from vstbundle.bundle import run_packaging_helper
        from vstbundle.errors import PackagingHelperFailed

        cfg = make_config()
        with (
            patch("vstbundle.bundle.helper.subprocess.run", side_effect=FileNotFoundError("cargo")),
            pytest.raises(PackagingHelperFailed, match="could not run"),
        ):
            run_packaging_helper(cfg.plugin, cfg.target, {})


class TestBundleLayout:
    def test_bundle_binary_path(self, plugin_root: Path) -> None:
        from vstbundle.bundle import bundle_binary_path

        p = bundle_binary_path(plugin_root, "HelloVst", "x86_64-win")
        assert p == (
            plugin_root
            / "target"
            / "bundled"
            / "HelloVst.vst3"
            / "Contents"
            / "x86_64-win"
            / "HelloVst.vst3"
        )

    def test_ensure_bundle_tree_is_idempotent(self, plugin_root: Path) -> None:
        from vstbundle.bundle import ensure_bundle_tree

        (plugin_root / "target").mkdir()
        leaf = ensure_bundle_tree(plugin_root, "HelloVst", "x86_64-win")
        first = _tree(plugin_root / "target")
        assert ensure_bundle_tree(plugin_root, "HelloVst", "x86_64-win") == leaf
        assert _tree(plugin_root / "target") == first
        assert leaf.is_dir()


class TestManualBundle:
    def _binary(self, plugin_root: Path, data: bytes = b"MZ\x90\x00dll") -> Path:
        out = plugin_root / "target" / "x86_64-pc-windows-msvc" / "release"
        out.mkdir(parents=True)
        binary = out / "hello_vst.dll"
        binary.write_bytes(data)
        return binary

    def test_copies_binary_into_bundle(self, plugin_root: Path) -> None:
        from vstbundle.bundle import manual_bundle

        binary = self._binary(plugin_root)
        dst = manual_bundle(binary, plugin_root, "HelloVst", "x86_64-win")
        assert dst.name == "HelloVst.vst3"
        assert dst.parent.name == "x86_64-win"
        assert dst.read_bytes() == binary.read_bytes()
        assert [p.name for p in dst.parent.iterdir()] == ["HelloVst.vst3"]

    def test_second_run_same_tree(self, plugin_root: Path) -> None:
        from vstbundle.bundle import manual_bundle

        binary = self._binary(plugin_root)
        manual_bundle(binary, plugin_root, "HelloVst", "x86_64-win")
        first = _tree(plugin_root / "target" / "bundled")
        manual_bundle(binary, plugin_root, "HelloVst", "x86_64-win")
        assert _tree(plugin_root / "target" / "bundled") == first

    def test_overwrites_stale_bundle(self, plugin_root: Path) -> None:
        from vstbundle.bundle import bundle_binary_path, ensure_bundle_tree, manual_bundle

        ensure_bundle_tree(plugin_root, "HelloVst", "x86_64-win")
        stale = bundle_binary_path(plugin_root, "HelloVst", "x86_64-win")
        stale.write_bytes(b"old build, longer than the new one")
        binary = plugin_root / "target" / "x86_64-pc-windows-msvc" / "release" / "hello_vst.dll"
        binary.parent.mkdir(parents=True)
        binary.write_bytes(b"new")
        manual_bundle(binary, plugin_root, "HelloVst", "x86_64-win")
        assert stale.read_bytes() == b"new"

    def test_missing_binary_raises_and_leaves_no_file(
        self, plugin_root: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        from vstbundle.bundle import bundle_binary_path, manual_bundle
        from vstbundle.errors import ManualBundleFailed

        binary = plugin_root / "target" / "x86_64-pc-windows-msvc" / "release" / "hello_vst.dll"
        with pytest.raises(ManualBundleFailed, match="manual bundle failed"):
            manual_bundle(binary, plugin_root, "HelloVst", "x86_64-win")
        dst = bundle_binary_path(plugin_root, "HelloVst", "x86_64-win")
        assert not dst.exists()
        assert list(dst.parent.iterdir()) == []
        assert "not found" in caplog.text

    def test_directory_creation_failure_raises(self, plugin_root: Path) -> None:
        from vstbundle.bundle import manual_bundle
        from vstbundle.errors import ManualBundleFailed

        (plugin_root / "target").write_text("not a directory")
        with pytest.raises(ManualBundleFailed, match="could not create"):
            manual_bundle(plugin_root / "x.dll", plugin_root, "HelloVst", "x86_64-win")
