"""
Configuration constants for the UPBOT supervisor.

All compile-time defaults in one place. Runtime-tunable copies of the
learning constants live in params.Parameters.
"""

# =============================================================================
# MATCHING / LEARNING
# =============================================================================

NUM_TO_MATCH = 15  # Sensor fields that must agree for two episodes to match
NUM_GOALS_TO_FIND = 50  # Goals to reach before a run counts as finished
DISCOUNT = 1.0  # Per-step discount applied to rewards further in the future
MAX_LEN_LHS = 1  # Episodes in a level-0 action's left-hand side
MAX_LEVEL_DEPTH = 4  # Abstraction levels (0 = raw episodes)
MAX_ROUTE_LEN = 15  # Longest chain of actions one route may hold

# Exploration (percent chance of a random mobile command)
RANDOM_CHANCE = 0
RANDOM_CHANCE_STEP = 5  # Dropped by this much after each random pick
RANDOM_CHANCE_FLOOR = 10  # ...while it is above this

# set_command2: reactive score must beat the scripted step by this much
DRIFT_MARGIN = 0.5

# =============================================================================
# ROOMBA SENSOR SCHEMA
# =============================================================================

ROOMBA_SENSORS = (
    "right_bump",
    "left_bump",
    "right_wheel_drop",
    "left_wheel_drop",
    "caster_drop",
    "wall",
    "cliff_left",
    "cliff_front_left",
    "cliff_front_right",
    "cliff_right",
    "virtual_wall",
    "ir",  # Docking beacon seen = goal
    "button_play",
    "button_advance",
    "side_brush_overcurrent",
    "main_brush_overcurrent",
)
NUM_SENSORS = len(ROOMBA_SENSORS)
GOAL_SENSOR = "ir"

# =============================================================================
# TRANSPORT (serial link to the robot-side data collector)
# =============================================================================

SERIAL_PORT = "/dev/ttyUSB0"
SERIAL_BAUDRATE = 57600
SERIAL_TIMEOUT = 1.0  # seconds; readline returns "" on timeout

CONTROL_LOOP_HZ = 10  # Upper bound; the robot's sensor stream sets the pace
STATS_EVERY_TICKS = 50

# =============================================================================
# WEB INTERFACE
# =============================================================================

WEB_HOST = "0.0.0.0"
WEB_PORT = 8080
