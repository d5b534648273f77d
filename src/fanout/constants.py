"""
Centralized constants for fanout.

Defaults and CLI step flags live here so the parser, config and CLI agree.
"""

# Concurrency limit used when neither config nor CLI sets one
DEFAULT_JOBS = 4

# Step flags recognised on the command line, in declaration order
SEQUENTIAL_FLAGS = {"-s", "--sequential"}
CONCURRENT_FLAGS = {"-c", "--concurrent"}
STDIN_FLAGS = {"-i", "--stdin"}

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

# Config file names searched in order
CONFIG_FILENAMES = ("config.yaml", "fanout.yaml")
