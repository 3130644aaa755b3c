"""Distribution install: prebuilt variant download with source-build fallback."""
