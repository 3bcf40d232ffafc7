# the one system prompt every provider family receives; only its placement
# in the request body differs between families

import platform
import sys


def _os_name() -> str:
    # match the short names people use ("linux", "macos", "windows")
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("win"):
        return "windows"
    return platform.system().lower() or sys.platform


def _arch() -> str:
    machine = platform.machine().lower()
    return {"amd64": "x86_64", "arm64": "aarch64"}.get(machine, machine) or "unknown"


def build_system_prompt() -> str:
    return (
        "You are a helpful assistant. Answer questions directly and concisely. "
        "Do not mention what you are designed for or add unnecessary caveats about "
        "the type of questions you can answer. "
        f"The user is on {_os_name()} ({_arch()})."
    )
