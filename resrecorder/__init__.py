"""Sample a process's resource use into time series; GIF block and frame parsing."""

__version__ = "0.1.0"