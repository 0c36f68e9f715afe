"""MCP tool registration for the Stability AI MCP Server"""

from tools.account import register_account_tools
from tools.control import register_control_tools
from tools.editing import register_editing_tools
from tools.generation import register_generation_tools
from tools.three_d import register_three_d_tools
from tools.upscale import register_upscale_tools

__all__ = [
    "register_account_tools",
    "register_control_tools",
    "register_editing_tools",
    "register_generation_tools",
    "register_three_d_tools",
    "register_upscale_tools",
]
