"""CodeTrack: list/detail/filter tool for personal code tracking notes."""

__version__ = "0.1.0"
