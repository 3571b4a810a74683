"""Backup manifest serialization."""

import json
from pathlib import Path
from typing import Any, Dict

from .._utils import logger
from ..data_map import DataMap
from ..exceptions import ManifestError
from .models import BackupContext, BackupManifest


def render_manifest(manifest: Dict[str, Any]) -> str:
    return json.dumps(manifest, indent=2)


def load_manifest(manifest_path: Path) -> Dict[str, Any]:
    """Load manifest JSON from file.

    Args:
        manifest_path: Manifest file path

    Returns:
        Manifest dictionary
    """
    with open(manifest_path, "r") as f:
        manifest = json.load(f)

    logger.debug(f"Manifest loaded: {manifest_path}")
    return manifest


class ManifestWriter:
    """Write the data map snapshot to ``<tmp_dir>/manifest.json``."""

    def __init__(self, context: BackupContext, data_map: DataMap):
        self.context = context
        self.data_map = data_map

    def manifest(self) -> Dict[str, Any]:
        return BackupManifest(**self.data_map.manifest()).model_dump()

    async def write_manifest(self) -> Path:
        """Serialize the manifest, replacing any existing file.

        Raises:
            ManifestError: if the file cannot be written
        """
        manifest_path = Path(self.context.manifest_path)
        try:
            with open(manifest_path, "w") as f:
                f.write(render_manifest(self.manifest()))
        except OSError as e:
            raise ManifestError(f"Failed to write manifest {manifest_path}: {e}") from e

        logger.info(f"Manifest written: {manifest_path}")
        return manifest_path
