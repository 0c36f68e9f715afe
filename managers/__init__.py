"""Manager classes for the Stability AI MCP Server"""

from managers.endpoint_registry import EndpointRegistry
from managers.job_poller import AsyncJobPoller
from managers.output_manager import OutputManager
from managers.request_builder import RequestBuilder

__all__ = ["AsyncJobPoller", "EndpointRegistry", "OutputManager", "RequestBuilder"]
