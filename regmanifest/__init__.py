"""Device register manifests: parsing, validation, address checks and rendering helpers."""

__version__ = "1.0.5"