"""opcbridge: forwards OPC-UA value changes to a message broker."""

__version__ = "0.1.0"
