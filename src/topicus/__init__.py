"""
Topicus public package interface.
"""

from .distribution import Distribution
from .errors import CountInvariantError, InvalidArgumentError, SamplingCancelledError
from .models import LdaConfiguration, LdaOutput, LdaReport
from .sampler import (
    GibbsSampler,
    LdaResult,
    RoundReport,
    SamplerResult,
    SamplerState,
    lda,
    lda_threads,
    topic_keywords,
)
from .sampling import weighted_draw
from .vocabulary import Vocabulary

__all__ = [
    "__version__",
    "CountInvariantError",
    "Distribution",
    "GibbsSampler",
    "InvalidArgumentError",
    "LdaConfiguration",
    "LdaOutput",
    "LdaReport",
    "LdaResult",
    "RoundReport",
    "SamplerResult",
    "SamplerState",
    "SamplingCancelledError",
    "Vocabulary",
    "lda",
    "lda_threads",
    "topic_keywords",
    "weighted_draw",
]

__version__ = "0.1.0"
