"""Application services built on the core pipeline.

Each service takes a ModelProvider, so callers choose the transport and
tests substitute a mock. The market audit is rule based and needs none.
"""

from kisanai.services.audit import audit_market
from kisanai.services.chat import ChatReply, answer, postprocess_answer, stream_answer
from kisanai.services.consult import get_consult_plan, get_growth_phases
from kisanai.services.crop import get_crop_analytics, is_farming_related
from kisanai.services.disease import diagnose_plant
from kisanai.services.modern_farming import get_modern_farming_analysis, is_technique_related
from kisanai.services.monitoring import analyze_image, is_rejected, is_valid_image

__all__ = [
    "ChatReply",
    "analyze_image",
    "answer",
    "audit_market",
    "diagnose_plant",
    "get_consult_plan",
    "get_crop_analytics",
    "get_growth_phases",
    "get_modern_farming_analysis",
    "is_farming_related",
    "is_rejected",
    "is_technique_related",
    "is_valid_image",
    "postprocess_answer",
    "stream_answer",
]
