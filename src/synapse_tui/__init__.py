"""Terminal admin panel for Synapse homeservers."""

__version__ = "0.1.0"
