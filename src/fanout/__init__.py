"""
fanout - Run shell commands as a linear workflow of stages

Each stage is either:
- a single command that must finish before the next stage starts
- a group of independent commands run concurrently under a shared cap
"""

__version__ = "0.1.0"
__package_name__ = "fanout"
__short_name__ = "fanout"
