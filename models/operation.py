"""Operation and field declaration models"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class Category(str, Enum):
    GENERATE = "generate"
    EDIT = "edit"
    UPSCALE = "upscale"
    CONTROL = "control"
    THREE_D = "3d"


class ExecutionMode(str, Enum):
    SYNC = "sync"
    ASYNC = "async"  # submit, then poll the results endpoint


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    CHOICE = "choice"
    FILE = "file"


@dataclass(frozen=True)
class FieldSpec:
    """One multipart field an operation accepts"""
    name: str  # Wire name of the form part
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    choices: Optional[Tuple] = None
    variants: Optional[FrozenSet[str]] = None  # Only attached for these variants
    requires: Optional[str] = None  # Only attached when this other field is present


@dataclass(frozen=True)
class OperationDescriptor:
    """A resolved upstream capability"""
    category: Category
    variant: str
    path: str
    mode: ExecutionMode = ExecutionMode.SYNC
    accept: str = "image/*"
    result_format: Optional[str] = None  # Fixed format for non-image payloads

    @property
    def name(self) -> str:
        return f"{self.category.value}:{self.variant}"

    @property
    def is_async(self) -> bool:
        return self.mode is ExecutionMode.ASYNC
