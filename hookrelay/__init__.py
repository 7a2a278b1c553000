"""hookrelay - webhook pool and channel settings cache for Discord bots."""
__version__ = "0.1.0"
