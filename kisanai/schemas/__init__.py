"""KisanAI schema definitions.

Pydantic v2 models for canonical records, configuration and streaming.
"""

from kisanai.schemas.audit import (
    CropWeatherAnalysis,
    MarketAudit,
    MarketData,
    RiskLevel,
    WeatherData,
)
from kisanai.schemas.config import (
    ExtractionConfig,
    ModelConfig,
    ServiceConfig,
    Settings,
    StreamConfig,
)
from kisanai.schemas.consult import ConsultPlan
from kisanai.schemas.crop import CropAnalytics
from kisanai.schemas.disease import DiseaseDiagnosis
from kisanai.schemas.messages import Completion, TokenUsage
from kisanai.schemas.modern_farming import Budget, ModernFarmingAnalysis
from kisanai.schemas.monitoring import (
    CropMonitoringResult,
    FieldMonitoringResult,
    MonitoringCategory,
    SoilMonitoringResult,
    ThermalMonitoringResult,
)
from kisanai.schemas.streaming import SegmentedAccumulator, SegmentedDelta

__all__ = [
    "Budget",
    "Completion",
    "ConsultPlan",
    "CropAnalytics",
    "CropMonitoringResult",
    "CropWeatherAnalysis",
    "DiseaseDiagnosis",
    "ExtractionConfig",
    "FieldMonitoringResult",
    "MarketAudit",
    "MarketData",
    "ModelConfig",
    "ModernFarmingAnalysis",
    "MonitoringCategory",
    "RiskLevel",
    "SegmentedAccumulator",
    "SegmentedDelta",
    "ServiceConfig",
    "Settings",
    "SoilMonitoringResult",
    "StreamConfig",
    "ThermalMonitoringResult",
    "TokenUsage",
    "WeatherData",
]
