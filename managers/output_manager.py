"""Saving generated results to local disk"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger("MCP_Server")


def auto_generate_filename(prefix: str, ext: str, now: Optional[datetime] = None) -> str:
    """Timestamped filename such as ``generated-2025-01-31T12-00-00-000Z.png``"""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    # ISO-8601 with ':' and '.' swapped for '-' so it is a valid filename everywhere
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"
    return f"{prefix}-{timestamp}.{ext}"


class OutputManager:
    """Resolves save paths in the configured output directories and writes files"""

    def __init__(self, output_dir: Union[str, Path], output_3d_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)
        self.output_3d_dir = Path(output_3d_dir)

    def auto_save_path(self, prefix: str, ext: str = "png", three_d: bool = False) -> Path:
        directory = self.output_3d_dir if three_d else self.output_dir
        return (directory / auto_generate_filename(prefix, ext)).resolve()

    def save(
        self,
        data: bytes,
        save_path: Optional[str] = None,
        prefix: str = "generated",
        ext: str = "png",
        three_d: bool = False,
    ) -> Path:
        """Write ``data`` to ``save_path`` or an auto-generated path.

        Parent directories are created as needed.

        Returns:
            Absolute path of the written file
        """
        if save_path:
            target = Path(save_path).expanduser().resolve()
        else:
            target = self.auto_save_path(prefix, ext, three_d=three_d)

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Saved %s bytes to %s", len(data), target)
        return target
