# maps_directory/config.py
from dotenv import load_dotenv
import os

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Where the dataset files are hosted (URL or local directory)
DATA_BASE_URL = os.getenv("DATA_BASE_URL", "http://localhost:3000/maps-directory-antigua")

# Categories, in display order
CATEGORY_FILES = {
    "Restaurants": "R8_google_maps_data.csv",
    "Gas Stations": "gas_stations_google_maps_data.csv",
    "Government": "government_departments_google_maps_data.csv",
    "Hardware Stores": "hardware_store_google_maps_data.csv",
    "Medical Clinics": "medical_clinic_google_maps_data.csv",
}
DEFAULT_CATEGORY = "Restaurants"

# Runtime parameters
CONCURRENCY = int(os.getenv("CONCURRENCY", "10"))
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "60"))
SHOW_ALL_CLEARS_QUERY = _env_bool("SHOW_ALL_CLEARS_QUERY", True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
