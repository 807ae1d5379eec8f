from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class EnrichmentConfig:
    """
    Configuration for the dataset enrichment script.
    """

    input_path: Path = Path("Dataset.csv")
    output_path: Path = Path("restaurants_enriched.json")
    seed: int | None = None
    min_amenities: int = 2
    max_amenities: int = 4


DEFAULT_ENRICHMENT_CONFIG = EnrichmentConfig()
