"""
Configuration for the pet shelter tracker
"""
import os

# Database configuration
DB_PATH = os.environ.get("PETS_DB_PATH", "shelter.db")

# Bump when the pets table changes shape. Older files are dropped and
# recreated on open (no data migration).
DATABASE_VERSION = 1

# Resource addressing
CONTENT_AUTHORITY = "com.example.android.pets"
CONTENT_SCHEME = "content"
PATH_PETS = "pets"

# Observer delivery pool
NOTIFIER_MAX_WORKERS = int(os.environ.get("PETS_NOTIFIER_WORKERS", 4))

# Logging (only the CLI entry point applies these)
LOG_LEVEL = os.environ.get("PETS_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Demonstration record used by `shelter.py dummy`
DUMMY_PET = {
  "name": "Toto",
  "breed": "Terrier",
  "gender": 1,  # Male
  "weight": 7,
}
