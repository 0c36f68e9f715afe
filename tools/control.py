"""ControlNet-guided generation tools"""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from managers.request_builder import optional_params
from models.operation import Category
from tools.helpers import run_in_worker, save_and_build_response


def register_control_tools(mcp: FastMCP, stability_client, output_manager):
    """Register sketch, structure, style and style-transfer tools"""

    async def _control(tool_name, variant, prefix, params, save_path, return_inline_preview):
        def work():
            result = stability_client.dispatch(Category.CONTROL, variant, optional_params(**params))
            return save_and_build_response(
                result,
                output_manager,
                prefix=prefix,
                save_path=save_path,
                return_inline_preview=return_inline_preview,
            )

        return await run_in_worker(tool_name, work)

    @mcp.tool()
    async def control_sketch(
        image_path: str,
        prompt: str,
        negative_prompt: Optional[str] = None,
        control_strength: Optional[float] = None,
        seed: Optional[int] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Generate an image from a sketch/drawing using ControlNet.

        The sketch guides the composition while the prompt defines the content.
        Trigger: 'stability sketch'.

        Args:
            image_path: Absolute path to the sketch/drawing image
            prompt: Text description of what to generate from the sketch
            control_strength: How closely to follow the sketch (0-1)
        """
        return await _control(
            "control_sketch",
            "sketch",
            "sketch",
            {
                "image": image_path,
                "prompt": prompt,
                "negative_prompt": negative_prompt,
                "control_strength": control_strength,
                "seed": seed,
                "output_format": output_format,
            },
            save_path,
            return_inline_preview,
        )

    @mcp.tool()
    async def control_structure(
        image_path: str,
        prompt: str,
        negative_prompt: Optional[str] = None,
        control_strength: Optional[float] = None,
        seed: Optional[int] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Generate an image guided by the structure/edges of a reference image using ControlNet.

        Preserves composition while changing content. Trigger: 'stability structure'.

        Args:
            image_path: Absolute path to the reference image (its structure will guide generation)
            prompt: Text description of what to generate
            control_strength: How closely to follow the structure (0-1)
        """
        return await _control(
            "control_structure",
            "structure",
            "structure",
            {
                "image": image_path,
                "prompt": prompt,
                "negative_prompt": negative_prompt,
                "control_strength": control_strength,
                "seed": seed,
                "output_format": output_format,
            },
            save_path,
            return_inline_preview,
        )

    @mcp.tool()
    async def control_style(
        image_path: str,
        prompt: str,
        negative_prompt: Optional[str] = None,
        fidelity: Optional[float] = None,
        seed: Optional[int] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Generate an image using a reference image to guide the visual style.

        The reference provides style cues while the prompt defines content.
        Trigger: 'stability style guide'.

        Args:
            image_path: Absolute path to the style reference image
            prompt: Text description of what to generate in the reference style
            fidelity: How closely to match the reference style (0-1)
        """
        return await _control(
            "control_style",
            "style",
            "styled",
            {
                "image": image_path,
                "prompt": prompt,
                "negative_prompt": negative_prompt,
                "fidelity": fidelity,
                "seed": seed,
                "output_format": output_format,
            },
            save_path,
            return_inline_preview,
        )

    @mcp.tool()
    async def style_transfer(
        init_image_path: str,
        style_image_path: str,
        prompt: Optional[str] = None,
        negative_prompt: Optional[str] = None,
        seed: Optional[int] = None,
        output_format: Optional[str] = None,
        save_path: Optional[str] = None,
        return_inline_preview: bool = True,
    ) -> dict:
        """Transfer the visual style of one image onto another.

        Combines a content image with a style reference. Trigger: 'stability style transfer'.

        Args:
            init_image_path: Absolute path to the content/source image
            style_image_path: Absolute path to the style reference image
            prompt: Optional prompt to guide the style transfer
        """
        return await _control(
            "style_transfer",
            "style-transfer",
            "transferred",
            {
                "init_image": init_image_path,
                "style_image": style_image_path,
                "prompt": prompt,
                "negative_prompt": negative_prompt,
                "seed": seed,
                "output_format": output_format,
            },
            save_path,
            return_inline_preview,
        )
