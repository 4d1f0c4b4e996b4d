from enum import Enum


class MonitorState(Enum):
    STARTING = "starting"
    RUNNING = "running"
    TERMINATING = "terminating"
    STOPPED = "stopped"
