"""pscpu - monitor the cpu usage of a process to a csv file."""

__version__ = "0.1"
