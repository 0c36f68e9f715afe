"""Multipart request body models"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class MultipartPart:
    name: str
    value: Optional[str] = None  # Text parts
    content: Optional[bytes] = None  # Binary parts
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.content is not None


@dataclass
class MultipartBody:
    """Ordered collection of named text and binary parts"""
    parts: List[MultipartPart] = field(default_factory=list)

    def add_text(self, name: str, value: str):
        self.parts.append(MultipartPart(name=name, value=value))

    def add_file(self, name: str, content: bytes, filename: str, content_type: str):
        self.parts.append(
            MultipartPart(name=name, content=content, filename=filename, content_type=content_type)
        )

    def names(self) -> List[str]:
        return [part.name for part in self.parts]

    def get(self, name: str) -> Optional[MultipartPart]:
        for part in self.parts:
            if part.name == name:
                return part
        return None

    def text_fields(self) -> dict:
        return {part.name: part.value for part in self.parts if not part.is_file}

    def to_requests_files(self) -> List[Tuple[str, Tuple]]:
        """Encode for ``requests``' ``files=`` argument, preserving part order.

        Text parts use a ``None`` filename so they are sent as plain form fields.
        """
        encoded = []
        for part in self.parts:
            if part.is_file:
                encoded.append((part.name, (part.filename, part.content, part.content_type)))
            else:
                encoded.append((part.name, (None, part.value)))
        return encoded
