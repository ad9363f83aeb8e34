import os
import config

LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}

_frame_id = None


def set_frame(frame_id):
    global _frame_id
    _frame_id = frame_id


def enabled(level):
    threshold = LEVELS.get(str(getattr(config, "LOG_LEVEL", "INFO")).upper(), 20)
    return LEVELS.get(level, 20) >= threshold


def log(scope, msg, level="INFO"):
    if scope in ("FRAME", "MAINLOOP") and not getattr(config, "LOG_MAIN_LOOP", True):
        return
    if not enabled(level):
        return
    frame = _frame_id
    frame_tag = f" f{frame}" if frame is not None else ""
    text = f"[{level}{frame_tag} {scope}] {msg}"
    use_color = getattr(config, "LOG_COLOR", True) and os.getenv("NO_COLOR") is None
    if use_color:
        if level == "ERROR":
            text = f"\x1b[31m{text}\x1b[0m"
        elif level == "WARN":
            text = f"\x1b[33m{text}\x1b[0m"
        elif level == "DEBUG":
            text = f"\x1b[32m{text}\x1b[0m"
    print(text)
