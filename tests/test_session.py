import pytest

from microwave.twin.session import SessionCommand, parse_script, run_session, session_summary

DOOR_CHECK_SCRIPT = """
# Cook for 30 s, peek at 6 s, resume at 20 s.
0 select 30000
1000 start
6000 open
20000 close
20000 start
"""


def test_run_session_replays_door_check() -> None:
    trace = run_session(parse_script(DOOR_CHECK_SCRIPT), until_ms=50_000, frame_interval_ms=100)

    expected_columns = {
        "time_ms",
        "remaining_ms",
        "state",
        "display",
        "duration_ms",
        "command",
        "rejected",
        "event",
    }
    assert expected_columns.issubset(set(trace.columns))
    assert len(trace) == 501
    assert trace["time_ms"].is_monotonic_increasing
    assert trace["remaining_ms"].between(0, 30_000).all()

    by_time = trace.set_index("time_ms")
    assert by_time.loc[6_000, "remaining_ms"] == 25_000
    assert by_time.loc[6_000, "state"] == "opened"
    assert by_time.loc[6_000, "event"] == "opened"
    assert by_time.loc[15_000, "remaining_ms"] == 25_000
    assert by_time.loc[20_000, "command"] == "close;start"
    assert by_time.loc[20_000, "state"] == "running"
    assert by_time.loc[45_000, "display"] == "00:00.000"
    assert by_time.loc[45_000, "event"] == "ended"

    summary = session_summary(trace)
    assert summary["final_state"] == "ended"
    assert summary["dings"] == 1
    assert summary["rejections"] == 0
    assert summary["ended_at_ms"] == 45_000


def test_run_session_records_rejected_commands() -> None:
    commands = [
        SessionCommand(at_ms=0, command="start"),
        SessionCommand(at_ms=1_000, command="select", duration_ms=10_000),
    ]

    trace = run_session(commands, until_ms=2_000, frame_interval_ms=500)

    row = trace.set_index("time_ms").loc[1_000]
    assert "select not allowed while running" in row["rejected"]
    assert row["remaining_ms"] == 29_000
    assert row["duration_ms"] == 30_000
    assert session_summary(trace)["rejections"] == 1


def test_run_session_samples_command_timestamps_off_the_frame_grid() -> None:
    trace = run_session(
        [SessionCommand(at_ms=1_234, command="start")],
        until_ms=3_000,
        frame_interval_ms=1_000,
    )

    assert trace["time_ms"].tolist() == [0, 1_000, 1_234, 2_000, 3_000]
    assert trace["remaining_ms"].tolist() == [30_000, 30_000, 30_000, 29_234, 28_234]


def test_run_session_validates_arguments() -> None:
    with pytest.raises(ValueError, match="until_ms"):
        run_session([], until_ms=-1)
    with pytest.raises(ValueError, match="frame_interval_ms"):
        run_session([], until_ms=1_000, frame_interval_ms=0)


def test_session_command_validation() -> None:
    with pytest.raises(ValueError, match="requires duration_ms"):
        SessionCommand(at_ms=0, command="select")
    with pytest.raises(ValueError, match="does not take"):
        SessionCommand(at_ms=0, command="start", duration_ms=1_000)
    with pytest.raises(ValueError, match="unknown command"):
        SessionCommand(at_ms=0, command="defrost")  # type: ignore[arg-type]


def test_parse_script_reports_line_numbers() -> None:
    with pytest.raises(ValueError, match="line 2"):
        parse_script("0 select 30000\n1000 start now\n")
    with pytest.raises(ValueError, match="line 1"):
        parse_script("0 select\n")
    with pytest.raises(ValueError, match="line 3"):
        parse_script("0 select 1000\n\n5 bake\n")


def test_parse_script_ignores_comments_and_blank_lines() -> None:
    commands = parse_script(DOOR_CHECK_SCRIPT)

    assert [command.command for command in commands] == [
        "select",
        "start",
        "open",
        "close",
        "start",
    ]
    assert commands[0].duration_ms == 30_000


def test_session_summary_of_empty_trace() -> None:
    trace = run_session([], until_ms=0)

    summary = session_summary(trace)

    assert summary["frames"] == 1
    assert summary["final_state"] == "idle"
    assert summary["dings"] == 0


def test_run_session_select_after_end_rearms_the_timer() -> None:
    commands = parse_script("0 select 1000\n0 start\n2000 select 3000\n2000 start\n")

    trace = run_session(commands, until_ms=6_000, frame_interval_ms=1_000)

    by_time = trace.set_index("time_ms")
    assert by_time.loc[1_000, "state"] == "ended"
    assert by_time.loc[2_000, "duration_ms"] == 3_000
    assert by_time.loc[2_000, "state"] == "running"
    assert by_time.loc[2_000, "rejected"] == ""
    assert by_time.loc[5_000, "state"] == "ended"
    assert session_summary(trace)["dings"] == 2
