"""Background workers running inside the API process."""

from .token_sweeper import start_token_sweeper, sweep_tokens_periodically

__all__ = [
    "start_token_sweeper",
    "sweep_tokens_periodically",
]
