"""Data models for the Stability AI MCP Server"""

from models.config import StabilityConfig
from models.multipart import MultipartBody, MultipartPart
from models.operation import Category, ExecutionMode, FieldKind, FieldSpec, OperationDescriptor
from models.result import AsyncJob, BalanceResult, GenerationResult, JobState

__all__ = [
    "AsyncJob",
    "BalanceResult",
    "Category",
    "ExecutionMode",
    "FieldKind",
    "FieldSpec",
    "GenerationResult",
    "JobState",
    "MultipartBody",
    "MultipartPart",
    "OperationDescriptor",
    "StabilityConfig",
]
