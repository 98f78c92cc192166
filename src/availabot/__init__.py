"""availabot: proposes your next free evenings, one chat message at a time."""

__version__ = "0.2.0"
