"""Planning engine building blocks: file patcher, session store, chat completion types."""

__version__ = "1.0.0"