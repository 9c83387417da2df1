"""
Robot command codes and their text forms.

The strings returned by interpret_command / interpret_command_short are
parsed by external log tooling; do not change them.
"""

CMD_NO_OP = 0
CMD_FORWARD = 1
CMD_LEFT = 2
CMD_RIGHT = 3
CMD_BLINK = 4
CMD_ADJUST_LEFT = 5
CMD_ADJUST_RIGHT = 6
CMD_SONG = 7

NUM_COMMANDS = 8
LAST_MOBILE_CMD = CMD_ADJUST_RIGHT

# Commands the selector may pick on its own
MOBILE_COMMANDS = tuple(range(CMD_FORWARD, LAST_MOBILE_CMD + 1))

_LONG_NAMES = {
    CMD_NO_OP: "no operation",
    CMD_FORWARD: "forward",
    CMD_LEFT: "left",
    CMD_RIGHT: "right",
    CMD_BLINK: "blink",
    CMD_ADJUST_LEFT: "adjust left",
    CMD_ADJUST_RIGHT: "adjust right",
    CMD_SONG: "song",
}

_SHORT_NAMES = {
    CMD_NO_OP: "NO",
    CMD_FORWARD: "FW",
    CMD_LEFT: "LT",
    CMD_RIGHT: "RT",
    CMD_BLINK: "BL",
    CMD_ADJUST_LEFT: "AL",
    CMD_ADJUST_RIGHT: "AR",
    CMD_SONG: "SG",
}


def is_valid_command(cmd: int) -> bool:
    return cmd in _LONG_NAMES


def interpret_command(cmd: int) -> str:
    """Human-readable name of a command code."""
    return _LONG_NAMES.get(cmd, "invalid command")


def interpret_command_short(cmd: int) -> str:
    """Two-letter name of a command code, used in compact logs."""
    return _SHORT_NAMES.get(cmd, "??")
