"""Configuration value sources, syntax-prefix preprocessors and validation rules."""

__version__ = "0.1.0"