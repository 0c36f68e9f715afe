"""Image editing tools (erase, inpaint, outpaint, search, background)"""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from managers.request_builder import optional_params
from models.operation import Category
from tools.helpers import run_in_worker, save_and_build_response


def register_editing_tools(mcp: FastMCP, stability_client, output_manager):
    """Register the image editing tools with the MCP server"""

    async def _edit(tool_name, variant, prefix, params, save_path, return_inline_preview, extra=None):
        def work():
            result = stability_client.dispatch(Category.EDIT, variant, optional_params(**params))
            return save_and_build_response(
                result,
                output_manager,
                prefix=prefix,
                save_path=save_path,
                return_inline_preview=return_inline_preview,
                extra=extra,
            )

        return await run_in_worker(tool_name, work)

    @mcp.tool()
    async def erase_object(
        image_path: str,
        mask_path: Optional[str] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Erase objects from an image using Stability AI.

        Provide an image and optionally a mask to indicate what to erase.
        Trigger: 'stability erase'.

        Args:
            image_path: Absolute path to the source image
            mask_path: Absolute path to mask image (white areas will be erased). If omitted, auto-detection is used.
            output_format: "png" (default), "jpeg" or "webp"
            save_path: File path to save the result
        """
        return await _edit(
            "erase_object",
            "erase",
            "erased",
            {"image": image_path, "mask": mask_path, "output_format": output_format},
            save_path,
            return_inline_preview,
        )

    @mcp.tool()
    async def inpaint(
        image_path: str,
        prompt: str,
        mask_path: Optional[str] = None,
        negative_prompt: Optional[str] = None,
        seed: Optional[int] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Fill in masked areas of an image with new AI-generated content based on a text prompt.

        Trigger: 'stability inpaint'.

        Args:
            image_path: Absolute path to the source image
            prompt: What to generate in the masked area
            mask_path: Absolute path to mask image (white areas will be inpainted)
        """
        return await _edit(
            "inpaint",
            "inpaint",
            "inpainted",
            {
                "image": image_path,
                "prompt": prompt,
                "mask": mask_path,
                "negative_prompt": negative_prompt,
                "seed": seed,
                "output_format": output_format,
            },
            save_path,
            return_inline_preview,
        )

    @mcp.tool()
    async def outpaint(
        image_path: str,
        prompt: Optional[str] = None,
        left: Optional[int] = None,
        right: Optional[int] = None,
        top: Optional[int] = None,
        bottom: Optional[int] = None,
        creativity: Optional[float] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Extend an image's boundaries in any direction with AI-generated content.

        Trigger: 'stability outpaint', 'stability extend'.

        Args:
            image_path: Absolute path to the source image
            prompt: Description of what to generate in the extended area
            left: Pixels to extend left (0-2000)
            right: Pixels to extend right (0-2000)
            top: Pixels to extend top (0-2000)
            bottom: Pixels to extend bottom (0-2000)
            creativity: Creativity level (0-1)
        """
        return await _edit(
            "outpaint",
            "outpaint",
            "outpainted",
            {
                "image": image_path,
                "prompt": prompt,
                "left": left,
                "right": right,
                "top": top,
                "bottom": bottom,
                "creativity": creativity,
                "output_format": output_format,
            },
            save_path,
            return_inline_preview,
        )

    @mcp.tool()
    async def search_and_replace(
        image_path: str,
        prompt: str,
        search_prompt: str,
        negative_prompt: Optional[str] = None,
        seed: Optional[int] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Find an object in an image by text description and replace it with something else.

        No mask needed. Trigger: 'stability replace'.

        Args:
            image_path: Absolute path to the source image
            prompt: What to replace the found object with
            search_prompt: Description of the object to find and replace
        """
        return await _edit(
            "search_and_replace",
            "search-and-replace",
            "replaced",
            {
                "image": image_path,
                "prompt": prompt,
                "search_prompt": search_prompt,
                "negative_prompt": negative_prompt,
                "seed": seed,
                "output_format": output_format,
            },
            save_path,
            return_inline_preview,
            extra={"message": f'Replaced "{search_prompt}" with "{prompt}"'},
        )

    @mcp.tool()
    async def search_and_recolor(
        image_path: str,
        prompt: str,
        select_prompt: str,
        negative_prompt: Optional[str] = None,
        seed: Optional[int] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Find an object in an image by text description and recolor it.

        No mask needed. Trigger: 'stability recolor'.

        Args:
            image_path: Absolute path to the source image
            prompt: The new color/appearance for the object
            select_prompt: Description of the object to find and recolor
        """
        return await _edit(
            "search_and_recolor",
            "search-and-recolor",
            "recolored",
            {
                "image": image_path,
                "prompt": prompt,
                "select_prompt": select_prompt,
                "negative_prompt": negative_prompt,
                "seed": seed,
                "output_format": output_format,
            },
            save_path,
            return_inline_preview,
            extra={"message": f'Recolored "{select_prompt}" to "{prompt}"'},
        )

    @mcp.tool()
    async def remove_background(
        image_path: str,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Remove the background from an image, leaving only the foreground subject with transparency.

        Trigger: 'stability remove bg', 'stability remove background'.

        Args:
            image_path: Absolute path to the source image
            output_format: "png" (default) or "webp"
        """
        return await _edit(
            "remove_background",
            "remove-background",
            "nobg",
            {"image": image_path, "output_format": output_format},
            save_path,
            return_inline_preview,
        )

    @mcp.tool()
    async def replace_background(
        image_path: str,
        background_prompt: str,
        foreground_prompt: Optional[str] = None,
        negative_prompt: Optional[str] = None,
        light_source_direction: Optional[str] = None,
        light_source_strength: Optional[float] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Replace the background of an image with AI-generated content and optionally adjust lighting.

        Trigger: 'stability replace bg', 'stability replace background'.

        Args:
            image_path: Absolute path to the source image
            background_prompt: Description of the new background to generate
            foreground_prompt: Optional description of the foreground subject for better results
            light_source_direction: "above", "below", "left" or "right"
            light_source_strength: Strength of the light source (0-1)
        """
        return await _edit(
            "replace_background",
            "replace-background-and-relight",
            "newbg",
            {
                "image": image_path,
                "background_prompt": background_prompt,
                "foreground_prompt": foreground_prompt,
                "negative_prompt": negative_prompt,
                "light_source_direction": light_source_direction,
                "light_source_strength": light_source_strength,
                "output_format": output_format,
            },
            save_path,
            return_inline_preview,
        )
