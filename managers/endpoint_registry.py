"""Static registry mapping (category, variant) to Stability AI endpoints"""

import logging
from typing import Dict, List, Union

from errors import UnknownVariantError
from models.operation import Category, ExecutionMode, OperationDescriptor

logger = logging.getLogger("MCP_Server")

GENERATION_MODELS: Dict[str, str] = {
    "ultra": "/v2beta/stable-image/generate/ultra",
    "core": "/v2beta/stable-image/generate/core",
    "sd3.5-large": "/v2beta/stable-image/generate/sd3",
    "sd3.5-large-turbo": "/v2beta/stable-image/generate/sd3",
    "sd3.5-medium": "/v2beta/stable-image/generate/sd3",
}

EDIT_ENDPOINTS: Dict[str, str] = {
    "erase": "/v2beta/stable-image/edit/erase",
    "inpaint": "/v2beta/stable-image/edit/inpaint",
    "outpaint": "/v2beta/stable-image/edit/outpaint",
    "search-and-replace": "/v2beta/stable-image/edit/search-and-replace",
    "search-and-recolor": "/v2beta/stable-image/edit/search-and-recolor",
    "remove-background": "/v2beta/stable-image/edit/remove-background",
    "replace-background-and-relight": "/v2beta/stable-image/edit/replace-background-and-relight",
}

UPSCALE_ENDPOINTS: Dict[str, str] = {
    "fast": "/v2beta/stable-image/upscale/fast",
    "conservative": "/v2beta/stable-image/upscale/conservative",
    "creative": "/v2beta/stable-image/upscale/creative",
}

CONTROL_ENDPOINTS: Dict[str, str] = {
    "sketch": "/v2beta/stable-image/control/sketch",
    "structure": "/v2beta/stable-image/control/structure",
    "style": "/v2beta/stable-image/control/style",
    "style-transfer": "/v2beta/stable-image/control/style-transfer",
}

THREE_D_ENDPOINTS: Dict[str, str] = {
    "stable-fast-3d": "/v2beta/3d/stable-fast-3d",
    "spar3d": "/v2beta/3d/stable-point-aware-3d",
}

BALANCE_ENDPOINT = "/v1/user/balance"
RESULTS_ENDPOINT = "/v2beta/results/{job_id}"

DEFAULT_VARIANTS: Dict[Category, str] = {
    Category.GENERATE: "core",
    Category.UPSCALE: "fast",
    Category.THREE_D: "stable-fast-3d",
}

_TABLES: Dict[Category, Dict[str, str]] = {
    Category.GENERATE: GENERATION_MODELS,
    Category.EDIT: EDIT_ENDPOINTS,
    Category.UPSCALE: UPSCALE_ENDPOINTS,
    Category.CONTROL: CONTROL_ENDPOINTS,
    Category.THREE_D: THREE_D_ENDPOINTS,
}

_ASYNC_VARIANTS = {(Category.UPSCALE, "creative")}


def results_path(job_id: str) -> str:
    return RESULTS_ENDPOINT.format(job_id=job_id)


class EndpointRegistry:
    """Read-only lookup of upstream endpoints.

    Resolution never touches the network, so an unknown variant is rejected
    before any request is built.
    """

    def resolve(self, category: Union[Category, str], variant: str = None) -> OperationDescriptor:
        """Return the descriptor for ``variant`` of ``category``.

        Raises:
            UnknownVariantError: If the category or variant is not registered
        """
        category = self._coerce_category(category)
        if variant is None:
            variant = DEFAULT_VARIANTS.get(category)
        table = _TABLES[category]
        if variant not in table:
            raise UnknownVariantError(category.value, str(variant), known=list(table))

        if category is Category.THREE_D:
            # The 3D endpoints answer with a glTF binary whatever the Accept header says
            return OperationDescriptor(
                category=category,
                variant=variant,
                path=table[variant],
                accept="application/json",
                result_format="glb",
            )

        mode = ExecutionMode.ASYNC if (category, variant) in _ASYNC_VARIANTS else ExecutionMode.SYNC
        return OperationDescriptor(category=category, variant=variant, path=table[variant], mode=mode)

    def variants(self, category: Union[Category, str]) -> List[str]:
        return list(_TABLES[self._coerce_category(category)])

    def describe(self) -> Dict[str, List[str]]:
        """All categories with their variant keys"""
        return {category.value: list(table) for category, table in _TABLES.items()}

    def _coerce_category(self, category: Union[Category, str]) -> Category:
        if isinstance(category, Category):
            return category
        try:
            return Category(category)
        except ValueError:
            raise UnknownVariantError("operation", str(category), known=[c.value for c in Category]) from None
