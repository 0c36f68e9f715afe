"""3D mesh generation tool"""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from managers.request_builder import optional_params
from models.operation import Category
from tools.helpers import run_in_worker, save_and_build_response


def register_three_d_tools(mcp: FastMCP, stability_client, output_manager):
    """Register the image-to-3D tool with the MCP server"""

    @mcp.tool()
    async def generate_3d(
        image_path: str,
        model: str = "stable-fast-3d",
        texture_resolution: Optional[int] = None,
        foreground_ratio: Optional[float] = None,
        remesh: Optional[str] = None,
        guidance_scale: Optional[float] = None,
        save_path: Optional[str] = None,
    ) -> dict:
        """Generate a 3D mesh (glTF/glb) from a single image using Stability AI.

        Two models: 'stable-fast-3d' (fast, 10 credits) and 'spar3d' (advanced, 4 credits).
        Trigger: 'stability 3d', 'stability mesh'.

        Args:
            image_path: Absolute path to the source image (clear subject on simple background works best)
            model: "stable-fast-3d" (fast, general purpose) or "spar3d" (advanced, editable)
            texture_resolution: 512, 1024 or 2048
            foreground_ratio: Foreground object ratio (0.1-1.0, stable-fast-3d only)
            remesh: Remeshing algorithm (stable-fast-3d only): "none", "triangle" or "quad"
            guidance_scale: Guidance scale (1-10, spar3d only)
            save_path: File path to save the .glb file. If not provided, auto-saves to the 3D output directory.
        """
        def work():
            result = stability_client.dispatch(
                Category.THREE_D,
                model,
                optional_params(
                    image=image_path,
                    texture_resolution=texture_resolution,
                    foreground_ratio=foreground_ratio,
                    remesh=remesh,
                    guidance_scale=guidance_scale,
                ),
            )
            return save_and_build_response(
                result,
                output_manager,
                prefix="model",
                save_path=save_path,
                three_d=True,
                extra={
                    "model": model,
                    "description": "glTF Binary (.glb)",
                    "size_kb": round(result.bytes_size / 1024, 1),
                },
            )

        return await run_in_worker("generate_3d", work)
