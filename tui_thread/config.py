import os
import tomllib
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from tui_thread.canvas import COLOR_NAMES
from tui_thread.debug_log import DebugLogger

DEFAULT_COLORS: Dict[str, Tuple[str, str]] = {
    "thread_view_arrow": ("green", "black"),
    "thread_view_date": ("cyan", "black"),
    "thread_view_tags": ("red", "black"),
    "cut_off_indicator": ("red", "black"),
    "status_bar_message": ("yellow", "black"),
}


@dataclass
class Config:
    notmuch: str = "notmuch"
    refresh_view: bool = True
    colors: Dict[str, Tuple[str, str]] = field(default_factory=lambda: dict(DEFAULT_COLORS))
    source_path: str = ""


def candidate_config_paths() -> List[str]:
    paths: List[str] = []
    env_paths = os.environ.get("TUI_THREAD_CONFIG", "").strip()
    if env_paths:
        for raw in env_paths.split(":"):
            path = raw.strip()
            if path:
                paths.append(os.path.abspath(os.path.expanduser(path)))

    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    if xdg:
        paths.append(os.path.join(os.path.abspath(os.path.expanduser(xdg)), "tui-thread", "config.toml"))
    else:
        paths.append(os.path.join(os.path.expanduser("~"), ".config", "tui-thread", "config.toml"))

    paths.append(os.path.join(os.path.expanduser("~"), ".tui-thread.toml"))

    unique: List[str] = []
    seen = set()
    for path in paths:
        if path not in seen:
            seen.add(path)
            unique.append(path)
    return unique


def load_config(
    path: Optional[str] = None,
    logger: Optional[DebugLogger] = None,
) -> Config:
    paths = [os.path.abspath(os.path.expanduser(path))] if path else candidate_config_paths()
    for candidate in paths:
        if not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, "rb") as fp:
                data = tomllib.load(fp)
        except (OSError, tomllib.TOMLDecodeError) as err:
            if logger:
                logger.log("WARN", f"cannot parse config path={candidate} err={err}")
            continue
        config = config_from_dict(data, logger=logger)
        config.source_path = candidate
        if logger:
            logger.log("BOOT", f"config loaded path={candidate}")
        return config

    if logger:
        logger.log("BOOT", "no config file found; using defaults")
    return Config()


def config_from_dict(data: dict, logger: Optional[DebugLogger] = None) -> Config:
    config = Config()

    general = data.get("general")
    if isinstance(general, dict):
        binary = str(general.get("notmuch", "")).strip()
        if binary:
            config.notmuch = binary
        refresh_view = general.get("refresh_view")
        if isinstance(refresh_view, bool):
            config.refresh_view = refresh_view

    colors = data.get("colors")
    if isinstance(colors, dict):
        for name, value in colors.items():
            if name not in DEFAULT_COLORS:
                if logger:
                    logger.log("WARN", f"unknown color entry name={name}")
                continue
            if not isinstance(value, dict):
                continue
            fg = str(value.get("fg", "")).strip().lower()
            bg = str(value.get("bg", "")).strip().lower()
            if fg not in COLOR_NAMES or bg not in COLOR_NAMES:
                if logger:
                    logger.log("WARN", f"invalid color name={name} fg={fg} bg={bg}")
                continue
            config.colors[name] = (fg, bg)

    return config
