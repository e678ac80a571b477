"""Envelopes and response normalization."""

from .envelope import Envelope, FailureEnvelope, SavedEnvelope, SuccessEnvelope, failure
from .normalizer import decode_body, normalize, save_body

__all__ = [
    "Envelope",
    "SuccessEnvelope",
    "SavedEnvelope",
    "FailureEnvelope",
    "failure",
    "normalize",
    "decode_body",
    "save_body",
]
