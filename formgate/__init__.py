"""
FormGate
Verification-gated submission gateway for static-site form entries
"""

__version__ = "0.1.0"
__author__ = "FormGate Team"

from formgate.config import GatewaySettings, get_config
from formgate.context import EntryParams, RequestContext
from formgate.errors import ErrorKind, ErrorTaxonomy, GatewayError
from formgate.normalizer import NormalizedResponse, ResponseNormalizer
from formgate.orchestrator import Failure, SubmissionOrchestrator, Success
from formgate.verification.gate import VerificationGate

__all__ = [
    "GatewaySettings",
    "get_config",
    "EntryParams",
    "RequestContext",
    "ErrorKind",
    "ErrorTaxonomy",
    "GatewayError",
    "NormalizedResponse",
    "ResponseNormalizer",
    "Failure",
    "SubmissionOrchestrator",
    "Success",
    "VerificationGate",
]
