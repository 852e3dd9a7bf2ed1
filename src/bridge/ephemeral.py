import json
import logging
import os
import uuid
from typing import Any, Dict, Optional

logger = logging.getLogger("sitecore_bridge.ephemeral")


class EphemeralConfigFile:
    """
    Per-request config file for the MCP server.

    Written on enter, removed on exit whatever the outcome. File names carry
    a random token so concurrent requests never share a path.

    Example:
        with EphemeralConfigFile(document, directory="/tmp") as path:
            ...  # spawn the server with --config path
    """

    def __init__(self, document: Dict[str, Any], directory: str):
        self.document = document
        self.path = os.path.join(directory, f"mcp-config-{uuid.uuid4().hex}.json")
        self._written = False

    def write(self) -> str:
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(self.document, fh, indent=2)
        self._written = True
        logger.info(f"Created MCP config file: {self.path}")
        return self.path

    def remove(self) -> None:
        """Delete the file. Failures are logged, never raised."""
        if not self._written:
            return
        try:
            os.unlink(self.path)
            logger.info(f"Cleaned up config file: {self.path}")
        except OSError as e:
            logger.warning(f"Failed to cleanup config file {self.path}: {e}")
        finally:
            self._written = False

    def __enter__(self) -> str:
        try:
            return self.write()
        except BaseException:
            # A partially written file still has to go
            self._written = os.path.exists(self.path)
            self.remove()
            raise

    def __exit__(self, exc_type, exc_val, exc_tb) -> Optional[bool]:
        self.remove()
        return None
