"""Image generation tools"""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from managers.request_builder import optional_params
from models.operation import Category
from tools.helpers import run_in_worker, save_and_build_response


def register_generation_tools(mcp: FastMCP, stability_client, output_manager):
    """Register text-to-image / image-to-image generation with the MCP server"""

    @mcp.tool()
    async def generate_image(
        prompt: str,
        model: str = "core",
        negative_prompt: Optional[str] = None,
        image_path: Optional[str] = None,
        strength: Optional[float] = None,
        aspect_ratio: Optional[str] = None,
        style_preset: Optional[str] = None,
        output_format: Optional[str] = None,
        seed: Optional[int] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Generate images using Stability AI's Stable Diffusion models.

        Supports text-to-image and image-to-image with multiple models.
        Trigger: 'stability generate', 'stability image', or 'stable diffusion'.

        Args:
            prompt: Text description of the image to generate (max 10000 characters)
            model: "ultra" (highest quality, 8 credits), "core" (fast/affordable, 3 credits),
                "sd3.5-large", "sd3.5-large-turbo" or "sd3.5-medium"
            negative_prompt: What to exclude from the image
            image_path: Source image path for image-to-image generation (ultra and sd3.5 models)
            strength: How much to transform the source image (0-1, only with image_path)
            aspect_ratio: "1:1", "16:9", "21:9", "2:3", "3:2", "4:5", "5:4", "9:16" or "9:21"
            style_preset: Style preset (core/sd3.5 only), e.g. "photographic", "anime",
                "digital-art", "cinematic", "3d-model", "pixel-art"
            output_format: "png" (default), "jpeg" or "webp"
            seed: Random seed for reproducibility (0-4294967294)
            save_path: File path to save the image. If not provided, auto-saves to the output directory.
            return_inline_preview: Include a small WebP preview of the result in the response
        """
        def work():
            result = stability_client.dispatch(
                Category.GENERATE,
                model,
                optional_params(
                    prompt=prompt,
                    negative_prompt=negative_prompt,
                    image=image_path,
                    strength=strength,
                    aspect_ratio=aspect_ratio,
                    style_preset=style_preset,
                    output_format=output_format,
                    seed=seed,
                ),
            )
            return save_and_build_response(
                result,
                output_manager,
                prefix="generated",
                save_path=save_path,
                return_inline_preview=return_inline_preview,
                extra={"model": model},
            )

        return await run_in_worker("generate_image", work)
