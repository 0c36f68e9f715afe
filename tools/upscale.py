"""Upscale tool"""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from managers.request_builder import optional_params
from models.operation import Category
from tools.helpers import run_in_worker, save_and_build_response


def register_upscale_tools(mcp: FastMCP, stability_client, output_manager):
    """Register the upscale tool with the MCP server"""

    @mcp.tool()
    async def upscale_image(
        image_path: str,
        mode: str = "fast",
        prompt: Optional[str] = None,
        negative_prompt: Optional[str] = None,
        creativity: Optional[float] = None,
        seed: Optional[int] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Upscale an image to higher resolution using Stability AI.

        Three modes: 'fast' (quick 2x), 'conservative' (detail-preserving),
        'creative' (AI-enhanced; runs as a background job and may take a few minutes).
        Trigger: 'stability upscale'.

        Args:
            image_path: Absolute path to the image to upscale
            mode: "fast" (2 credits), "conservative" (25 credits), "creative" (25 credits, async)
            prompt: Guide the upscaler (conservative/creative modes only)
            negative_prompt: What to avoid (conservative/creative modes only)
            creativity: How creative the upscaler should be (0-0.35, conservative/creative only)
            seed: Random seed (conservative/creative only)
            output_format: "png" (default), "jpeg" or "webp"
            save_path: File path to save the result
        """
        def work():
            result = stability_client.dispatch(
                Category.UPSCALE,
                mode,
                optional_params(
                    image=image_path,
                    prompt=prompt,
                    negative_prompt=negative_prompt,
                    creativity=creativity,
                    seed=seed,
                    output_format=output_format,
                ),
            )
            return save_and_build_response(
                result,
                output_manager,
                prefix=f"upscaled-{mode}",
                save_path=save_path,
                return_inline_preview=return_inline_preview,
                extra={"mode": mode},
            )

        return await run_in_worker("upscale_image", work)
