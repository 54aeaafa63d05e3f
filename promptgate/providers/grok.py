"""xAI Grok adapter. Grok speaks the OpenAI chat completions envelope."""

from .base import ProviderAdapter
from .openai import parse_chat_completion, prepare_chat_completion
from .registry import register_adapter


GROK_ADAPTER = register_adapter(
    ProviderAdapter(
        name="grok",
        prepare=prepare_chat_completion,
        parse=parse_chat_completion,
        default_base_url="https://api.x.ai/v1",
    )
)
