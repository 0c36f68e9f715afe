"""Shared helper functions for tool implementations"""

import logging
from typing import Any, Callable, Dict, Optional

import anyio

from asset_processor import encode_preview_for_mcp, get_image_metadata
from errors import StabilityAPIError, StabilityError, ValidationError
from models.result import GenerationResult

logger = logging.getLogger("MCP_Server")


async def run_in_worker(tool_name: str, work: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
    """Run a blocking tool body in a worker thread.

    HTTP calls and poll delays happen inside ``work``, so the event loop keeps
    serving other tool calls meanwhile. Failures become an error response.
    """
    try:
        return await anyio.to_thread.run_sync(work)
    except Exception as exc:
        return error_response(exc, tool_name)


def save_and_build_response(
    result: GenerationResult,
    output_manager,
    prefix: str,
    save_path: Optional[str] = None,
    return_inline_preview: bool = True,
    three_d: bool = False,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Save a result to disk and build the tool response.

    Args:
        result: GenerationResult from the Stability client
        output_manager: OutputManager used for the save path
        prefix: Filename prefix for auto-generated paths
        save_path: Explicit target path, overrides the auto-generated one
        return_inline_preview: Whether to include a downscaled WebP preview
        three_d: Save into the 3D output directory
        extra: Additional keys merged into the response

    Returns:
        Response data dict with saved_path, format, mime_type, bytes_size, etc.
    """
    saved_to = output_manager.save(
        result.data,
        save_path=save_path,
        prefix=prefix,
        ext=result.format,
        three_d=three_d,
    )

    response_data: Dict[str, Any] = {
        "saved_path": str(saved_to),
        "format": result.format,
        "mime_type": result.mime_type,
        "bytes_size": result.bytes_size,
    }
    if result.seed is not None:
        response_data["seed"] = result.seed
    if result.finish_reason:
        response_data["finish_reason"] = result.finish_reason

    if not three_d:
        metadata = get_image_metadata(result.data)
        response_data["width"] = metadata["width"]
        response_data["height"] = metadata["height"]

        if return_inline_preview:
            try:
                encoded = encode_preview_for_mcp(result.data, max_dim=256, quality=70)
                response_data["inline_preview_base64"] = encoded.data_uri
                response_data["inline_preview_mime_type"] = encoded.mime_type
            except (ValueError, OSError) as e:
                logger.warning(f"Failed to generate inline preview: {e}")
                # Don't fail the request if preview generation fails

    if extra:
        response_data.update(extra)
    return response_data


def error_response(exc: Exception, tool_name: str) -> Dict[str, Any]:
    """Log a failed tool call and turn the exception into a response dict"""
    if isinstance(exc, ValidationError):
        logger.warning("Tool '%s' rejected input: %s", tool_name, exc)
    elif isinstance(exc, StabilityError):
        logger.error("Tool '%s' failed: %s", tool_name, exc)
    else:
        logger.exception("Tool '%s' failed unexpectedly", tool_name)

    response: Dict[str, Any] = {"error": str(exc), "error_type": type(exc).__name__}
    if isinstance(exc, StabilityAPIError):
        response["status_code"] = exc.status_code
    return response
