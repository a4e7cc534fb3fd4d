"""PromptHub: a prompt library with templated runs against a configurable LLM."""

__version__ = "0.1.0"
