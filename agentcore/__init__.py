"""agentcore - In-process task and tool orchestration core."""

__version__ = "0.1.0"
