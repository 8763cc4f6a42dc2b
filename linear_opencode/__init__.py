"""linear-opencode - Linear webhooks and tools for the OpenCode agent host."""
__version__ = "0.1.0"
