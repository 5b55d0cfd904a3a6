from __future__ import annotations

import io
from pathlib import Path

import pytest

from surface_distance.progress import ProgressPrinter


def test_progress_printer_renders_voxel_counts() -> None:
    stream = io.StringIO()
    progress = ProgressPrinter(enabled=True, stream=stream, min_interval_s=0.0)
    cb = progress.callback("[1/2] ")
    cb("surface distance", 5, 10)
    cb("surface distance", 10, 10)
    progress.finish()

    text = stream.getvalue()
    assert "[1/2] surface distance:  50% (5/10 voxels)" in text
    assert "100% (10/10 voxels)" in text
    assert text.endswith("\n")


def test_progress_printer_is_silent_when_disabled() -> None:
    stream = io.StringIO()
    progress = ProgressPrinter(enabled=False, stream=stream)
    progress.update(label="x", current=1, total=2)
    progress.finish()
    assert stream.getvalue() == ""

    progress.log("WARNING: hello")
    assert stream.getvalue() == "WARNING: hello\n"


def test_progress_printer_defaults_to_disabled_off_tty() -> None:
    assert ProgressPrinter(stream=io.StringIO()).enabled is False


def test_run_config_to_argv(tmp_path: Path) -> None:
    from main import RunConfig

    pre = tmp_path / "pre.data"
    post = tmp_path / "post.data"
    pre.write_bytes(bytes(64))
    post.write_bytes(bytes(64))

    cfg = RunConfig(pre=str(pre), post=str(post), width=8, height=8, begin=(1, 1), end=(7, 4), pixel_height=None)
    argv = cfg.to_argv()
    assert argv[:5] == ["compare", "--pre", str(pre), "--post", str(post)]
    assert argv[argv.index("--begin") + 1 : argv.index("--begin") + 3] == ["1", "1"]
    assert argv[argv.index("--end") + 1 : argv.index("--end") + 3] == ["7", "4"]
    assert argv[argv.index("--pixel_distance") + 1] == "30"
    assert "--pixel_height" not in argv
    assert "--plots" not in argv


def test_run_config_rejects_endpoint_outside_image(tmp_path: Path) -> None:
    from main import RunConfig

    pre = tmp_path / "pre.data"
    pre.write_bytes(bytes(16))
    cfg = RunConfig(pre=str(pre), post=str(pre), width=4, height=4, begin=(0, 0), end=(4, 1))
    with pytest.raises(ValueError, match="outside"):
        cfg.validate()


def test_run_config_missing_data() -> None:
    from main import RunConfig

    with pytest.raises(ValueError, match="not found"):
        RunConfig(pre="does-not-exist.data").validate()
