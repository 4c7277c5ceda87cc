from __future__ import annotations

import logging

import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from microwave_3d_component import publish_frame, render_microwave_3d

from microwave.config import DEFAULT_SETTINGS
from microwave.log import configure_logging
from microwave.timer.clock import monotonic_ms
from microwave.timer.controller import CommandResult, TimerController, TimerEvent, TimerState
from microwave.timer.formatting import format_time
from microwave.twin.scene import build_visual_frame, dialog_text
from microwave.twin.session import parse_script, run_session, session_summary

configure_logging(logging.INFO)
logger = logging.getLogger("microwave.dashboard")

st.set_page_config(page_title="Microwave Twin", layout="wide")

st.markdown(
    """
<style>
.stApp {
    background-color: #fbf6ee;
    color: #2b2118;
    font-family: "JetBrains Mono", "SFMono-Regular", monospace;
}
[data-testid="stSidebar"] {
    background-color: #f3e8d8;
    border-right: 1px solid #e0cfb6;
}
[data-testid="stMetric"] {
    background-color: #111111;
    border: 1px solid #2a2a2a;
    border-radius: 8px;
    padding: 10px 12px;
}
[data-testid="stMetricValue"] {
    color: #00ff55;
}
</style>
""",
    unsafe_allow_html=True,
)

PLOT_TEMPLATE = "plotly_white"
ACCENT_GREEN = "#1f9d55"
ACCENT_ORANGE = "#e8772e"
SETTINGS = DEFAULT_SETTINGS

DEFAULT_SCRIPT = """# at_ms command [duration_ms]
0 select 30000
1000 start
6000 open
20000 close
20000 start
"""

STATE_LABELS = {
    TimerState.IDLE: "Idle",
    TimerState.RUNNING: "Cooking",
    TimerState.OPENED: "Door open",
    TimerState.ENDED: "Done",
}


def _session_controller() -> tuple[TimerController, list[TimerEvent]]:
    if "timer_controller" not in st.session_state:
        events: list[TimerEvent] = []
        st.session_state["timer_events"] = events
        st.session_state["timer_controller"] = TimerController(
            SETTINGS.default_duration_ms,
            on_event=events.append,
        )
        logger.info("created timer controller for new browser session")
    return st.session_state["timer_controller"], st.session_state["timer_events"]


def _remember_rejection(result: CommandResult) -> None:
    if not result.ok:
        st.session_state["timer_notice"] = str(result.rejected)


def _on_select() -> None:
    controller, _ = _session_controller()
    _remember_rejection(controller.select(int(st.session_state["duration_choice"])))


def _on_start() -> None:
    controller, _ = _session_controller()
    chosen_ms = int(st.session_state["duration_choice"])
    if controller.state is not TimerState.RUNNING and (
        controller.state is TimerState.ENDED or controller.duration_ms != chosen_ms
    ):
        _remember_rejection(controller.select(chosen_ms))
    _remember_rejection(controller.start(monotonic_ms()))


def _on_open() -> None:
    controller, _ = _session_controller()
    _remember_rejection(controller.open(monotonic_ms()))


def _on_close() -> None:
    controller, _ = _session_controller()
    _remember_rejection(controller.close())


@st.dialog("Microwave")
def _show_dialog(text: str) -> None:
    st.subheader(text)


controller, pending_events = _session_controller()

with st.sidebar:
    st.header("Controls")
    st.selectbox(
        "Cook time",
        options=list(SETTINGS.preset_durations_ms),
        index=SETTINGS.preset_durations_ms.index(SETTINGS.default_duration_ms),
        format_func=format_time,
        key="duration_choice",
        on_change=_on_select,
    )
    control_cols = st.columns(3)
    control_cols[0].button("Go", type="primary", on_click=_on_start, width="stretch")
    control_cols[1].button("Open", on_click=_on_open, width="stretch")
    control_cols[2].button("Close", on_click=_on_close, width="stretch")
    st.caption(
        "Opening the door pauses the countdown. Close it and press Go to resume "
        "from the time that was left."
    )

notice = st.session_state.pop("timer_notice", None)
if notice:
    st.toast(notice)

if pending_events:
    drained = list(pending_events)
    pending_events.clear()
    for event in drained[:-1]:
        st.toast(dialog_text(event, duration_ms=controller.duration_ms))
    _show_dialog(dialog_text(drained[-1], duration_ms=controller.duration_ms))

st.title("Microwave Twin")

tab_live, tab_replay = st.tabs(["Live Appliance", "Session Replay"])

with tab_live:
    initial = controller.sample(monotonic_ms())
    render_microwave_3d(
        build_visual_frame(initial, elapsed_ms=controller.elapsed_ms, settings=SETTINGS),
        height=SETTINGS.scene_height_px,
    )

    @st.fragment(run_every=SETTINGS.frame_interval_ms / 1000.0)
    def _live_panel() -> None:
        live_controller, live_events = _session_controller()
        sample = live_controller.sample(monotonic_ms())
        publish_frame(
            build_visual_frame(sample, elapsed_ms=live_controller.elapsed_ms, settings=SETTINGS)
        )
        kpi_cols = st.columns(3)
        kpi_cols[0].metric("Display", sample.display)
        kpi_cols[1].metric("State", STATE_LABELS[sample.state])
        kpi_cols[2].metric("Cook time", format_time(live_controller.duration_ms))
        if live_events:
            st.rerun()

    _live_panel()

with tab_replay:
    st.markdown(
        "Replay a scripted session against a fresh timer on a fixed frame clock. "
        "One command per line: `<at_ms> <select|start|open|close> [duration_ms]`."
    )
    script_text = st.text_area("Script", value=DEFAULT_SCRIPT, height=180)
    replay_cols = st.columns(2)
    until_ms = replay_cols[0].number_input(
        "Replay until (ms)", min_value=0, max_value=3_600_000, value=50_000, step=1000
    )
    frame_interval_ms = replay_cols[1].number_input(
        "Frame interval (ms)",
        min_value=1,
        max_value=10_000,
        value=SETTINGS.frame_interval_ms,
        step=10,
    )

    try:
        commands = parse_script(script_text)
    except ValueError as exc:
        st.error(str(exc))
        commands = None

    if commands is not None:
        trace = run_session(
            commands,
            until_ms=int(until_ms),
            frame_interval_ms=int(frame_interval_ms),
            settings=SETTINGS,
        )
        summary = session_summary(trace)

        summary_cols = st.columns(4)
        summary_cols[0].metric("Final display", str(summary["final_display"]))
        summary_cols[1].metric("Final state", str(summary["final_state"]))
        summary_cols[2].metric("Dings", int(summary["dings"]))
        summary_cols[3].metric("Rejected commands", int(summary["rejections"]))

        countdown_fig = go.Figure()
        countdown_fig.add_trace(
            go.Scatter(
                x=trace["time_ms"] / 1000.0,
                y=trace["remaining_ms"] / 1000.0,
                mode="lines",
                name="Remaining",
                line=dict(color=ACCENT_GREEN, width=2.4),
            )
        )
        command_rows = trace[trace["command"] != ""]
        countdown_fig.add_trace(
            go.Scatter(
                x=command_rows["time_ms"] / 1000.0,
                y=command_rows["remaining_ms"] / 1000.0,
                mode="markers+text",
                text=command_rows["command"],
                textposition="top center",
                name="Commands",
                marker=dict(color=ACCENT_ORANGE, size=9),
            )
        )
        countdown_fig.update_layout(
            template=PLOT_TEMPLATE,
            title="Countdown Trace",
            xaxis_title="Host clock (s)",
            yaxis_title="Remaining (s)",
        )
        st.plotly_chart(countdown_fig, width="stretch")

        event_rows = trace[(trace["command"] != "") | (trace["event"] != "")]
        st.markdown("**Command and event log**")
        st.dataframe(
            pd.DataFrame(
                {
                    "time_ms": event_rows["time_ms"],
                    "display": event_rows["display"],
                    "state": event_rows["state"],
                    "command": event_rows["command"],
                    "event": event_rows["event"],
                    "rejected": event_rows["rejected"],
                }
            ),
            width="stretch",
            hide_index=True,
        )
