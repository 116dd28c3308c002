"""Category taxonomy loading and management."""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from models.category_map import CategoryMap
from logger import get_logger

logger = get_logger()

DEFAULT_TAXONOMY = "default"


class TaxonomyLoader:
    """Loads category taxonomies (bucket mapping and suggestions) from YAML files."""

    def __init__(self, taxonomy_dir: Optional[Path] = None):
        """Initialize the taxonomy loader.

        Args:
            taxonomy_dir: Directory containing taxonomy YAML files.
                          Defaults to the taxonomy/ package directory.
        """
        if taxonomy_dir is None:
            self.taxonomy_dir = Path(__file__).parent
        else:
            self.taxonomy_dir = taxonomy_dir

        self._cache: Dict[Path, Dict[str, Any]] = {}

    def _resolve(self, name_or_path) -> Path:
        path = Path(name_or_path)
        if path.suffix in (".yaml", ".yml"):
            return path
        return self.taxonomy_dir / f"{name_or_path}.yaml"

    def load(self, name_or_path=DEFAULT_TAXONOMY) -> Dict[str, Any]:
        """Load a taxonomy configuration from a YAML file.

        Args:
            name_or_path: Taxonomy name (file in taxonomy_dir without .yaml
                          extension) or a path to a YAML file.

        Returns:
            Dictionary containing the taxonomy configuration.

        Raises:
            FileNotFoundError: If the taxonomy file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            ValueError: If the file has no buckets section.
        """
        taxonomy_file = self._resolve(name_or_path)

        if taxonomy_file in self._cache:
            return self._cache[taxonomy_file]

        if not taxonomy_file.exists():
            raise FileNotFoundError(f"Taxonomy file not found: {taxonomy_file}")

        logger.info(f"Loading category taxonomy from {taxonomy_file}")

        with open(taxonomy_file, "r") as f:
            taxonomy = yaml.safe_load(f) or {}

        if "buckets" not in taxonomy:
            raise ValueError(f"Taxonomy file {taxonomy_file} has no 'buckets' section")

        self._cache[taxonomy_file] = taxonomy
        return taxonomy

    def category_map(self, name_or_path=DEFAULT_TAXONOMY) -> CategoryMap:
        """Build the Needs/Wants CategoryMap for a taxonomy."""
        buckets = self.load(name_or_path)["buckets"]
        return CategoryMap.from_lists(
            needs=buckets.get("needs") or [],
            wants=buckets.get("wants") or [],
            savings_category=buckets.get("savings_category"),
        )

    def suggestions(
        self, entry_type: str, name_or_path=DEFAULT_TAXONOMY
    ) -> List[str]:
        """Get the suggested categories for an entry type.

        Returns:
            List of category names, empty if the type has none.
        """
        suggestions = self.load(name_or_path).get("suggestions") or {}
        return list(suggestions.get(entry_type) or [])


_default_loader = TaxonomyLoader()


def get_category_map(taxonomy_file: Optional[Path] = None) -> CategoryMap:
    """Get the CategoryMap from a configured taxonomy file, or the packaged default."""
    if taxonomy_file is not None:
        return _default_loader.category_map(taxonomy_file)
    return _default_loader.category_map()
