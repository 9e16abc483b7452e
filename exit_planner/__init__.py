"""Exit strategy validation and synthesis for in-progress hikes."""

from .extraction import extract_payload
from .issues import IssueCode, SynthesisError, SynthesisResult
from .reference_store import ReferenceStore
from .synthesis import synthesize
from .validation import validate_candidate

__all__ = [
    "IssueCode",
    "ReferenceStore",
    "SynthesisError",
    "SynthesisResult",
    "extract_payload",
    "synthesize",
    "validate_candidate",
]
