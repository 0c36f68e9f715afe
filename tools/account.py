"""Account and catalog tools for the Stability AI MCP Server"""

from mcp.server.fastmcp import FastMCP
from managers.request_builder import ASPECT_RATIOS, OUTPUT_FORMATS, STYLE_PRESETS
from tools.helpers import run_in_worker


def register_account_tools(mcp: FastMCP, stability_client):
    """Register balance and model listing tools with the MCP server"""

    @mcp.tool()
    async def check_balance() -> dict:
        """Check your Stability AI credits balance.

        Trigger: 'stability balance', 'stability credits'.
        """
        def work():
            balance = stability_client.check_balance()
            return {
                "credits": balance.credits,
                "message": f"Stability AI Credits: {balance.credits:.2f}",
            }

        return await run_in_worker("check_balance", work)

    @mcp.tool()
    def list_models() -> dict:
        """List the models, modes and operations each tool accepts.

        Helps pick a `model` for generate_image / generate_3d or a `mode` for
        upscale_image without guessing.
        """
        return {
            "operations": stability_client.registry.describe(),
            "output_formats": list(OUTPUT_FORMATS),
            "aspect_ratios": list(ASPECT_RATIOS),
            "style_presets": list(STYLE_PRESETS),
        }
