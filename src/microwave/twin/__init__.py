from microwave.twin.scene import DING_TEXT, NOT_STARTED_TEXT, build_visual_frame, dialog_text
from microwave.twin.session import SessionCommand, parse_script, run_session, session_summary

__all__ = [
    "DING_TEXT",
    "NOT_STARTED_TEXT",
    "build_visual_frame",
    "dialog_text",
    "SessionCommand",
    "parse_script",
    "run_session",
    "session_summary",
]
