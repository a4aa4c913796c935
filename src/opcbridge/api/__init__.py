"""opcbridge REST API."""
