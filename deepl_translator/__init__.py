"""DeepL translator: translation orchestration core and HTTP API."""

__version__ = "1.0.0"
