import json
import logging
from functools import lru_cache
from pathlib import Path

from treatplan.infra.paths import REFERENCE_FILE
from treatplan.logic.reference.tables import ReferenceData

logger = logging.getLogger(__name__)


def read_reference_tables(path: Path = REFERENCE_FILE) -> ReferenceData:
    """Read the reference tables JSON file into a ReferenceData lookup object."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    reference = ReferenceData.from_dict(data)
    logger.info("Loaded reference tables from %s (%d treatments, %d findings)",
                path, len(reference.treatments), len(reference.findings))
    return reference


@lru_cache(maxsize=1)
def load_reference_data() -> ReferenceData:
    """Process-wide reference tables, loaded once from the shipped JSON file."""
    return read_reference_tables(REFERENCE_FILE)
