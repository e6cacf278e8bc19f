"""Document block kinds, synthesis and validation."""

from .models import Block, BlockKind, payload_text, to_payloads
from .synthesizer import normalize_format, synthesize
from .validator import validate, validate_all

__all__ = [
    "Block",
    "BlockKind",
    "normalize_format",
    "payload_text",
    "synthesize",
    "to_payloads",
    "validate",
    "validate_all",
]
