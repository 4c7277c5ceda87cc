from __future__ import annotations

import importlib.util
from pathlib import Path

import pandas as pd

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "replay_session.py"


def _load_replay_module():
    spec = importlib.util.spec_from_file_location("replay_session", SCRIPT_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_replay_script_writes_trace_csv(tmp_path) -> None:
    replay = _load_replay_module()
    script = tmp_path / "quick.txt"
    script.write_text("0 select 10000\n0 start\n", encoding="utf-8")
    output = tmp_path / "out" / "quick.csv"

    written = replay.replay_script(
        script_path=script,
        until_ms=12_000,
        frame_interval_ms=1_000,
        output_path=output,
    )

    assert written == output
    trace = pd.read_csv(written, keep_default_na=False)
    assert len(trace) == 13
    assert trace["state"].iloc[-1] == "ended"
    assert (trace["event"] == "ended").sum() == 1
