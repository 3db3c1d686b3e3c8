from .gemini import GeminiGenerationClient, GenerationClient, build_genai_client, strip_thinking

__all__ = [
    "GeminiGenerationClient",
    "GenerationClient",
    "build_genai_client",
    "strip_thinking",
]
