"""mship: release, distribution and setup tooling for muesli."""

__version__ = "0.1.0"
