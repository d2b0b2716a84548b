from folio_assistant.synthesis.fallback import compose_fallback
from folio_assistant.synthesis.gate import is_generated_answer_reliable
from folio_assistant.synthesis.generation import (
    AnthropicTextGenerator,
    GenerationResult,
    TextGenerator,
)
from folio_assistant.synthesis.pipeline import (
    GenerationOutcome,
    build_answer,
    resolve_symbols,
)

__all__ = [
    "AnthropicTextGenerator",
    "GenerationOutcome",
    "GenerationResult",
    "TextGenerator",
    "build_answer",
    "compose_fallback",
    "is_generated_answer_reliable",
    "resolve_symbols",
]
