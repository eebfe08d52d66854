# specver/llm/azure_client.py
from specver.core.config import Settings


def get_azure_openai(s: Settings):
    """AzureOpenAI client, or None when this deployment has no LLM configured."""
    if not s.suggestions_enabled:
        return None

    # Import here so missing deps don't crash module import
    from openai import AzureOpenAI
    return AzureOpenAI(
        api_key=s.api_key,
        api_version=s.suggest_api_ver,
        azure_endpoint=s.endpoint,
    )
