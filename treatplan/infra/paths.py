from pathlib import Path

# Centralized paths for data files (single source of truth)
DATA_DIR = (Path(__file__).parent.parent / 'data').resolve()
REFERENCE_FILE = DATA_DIR / 'reference_tables.json'
RECORDS_FILE = DATA_DIR / 'patient_records.json'

__all__ = ['DATA_DIR', 'REFERENCE_FILE', 'RECORDS_FILE']
