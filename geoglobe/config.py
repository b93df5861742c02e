import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Config:
    # Natural Earth admin-0 countries, GeoJSON
    DATA_PATH = os.environ.get('GEOGLOBE_DATA_PATH') or str(PROJECT_ROOT / 'data' / 'countries-50m.geojson')
    DATA_URL = os.environ.get('GEOGLOBE_DATA_URL') or (
        'https://raw.githubusercontent.com/nvkelso/natural-earth-vector/master/'
        'geojson/ne_50m_admin_0_countries.geojson'
    )
    DOWNLOAD_TIMEOUT_SEC = int(os.environ.get('GEOGLOBE_DOWNLOAD_TIMEOUT_SEC', '30'))
    # Saved game and statistics
    STORE_PATH = os.environ.get('GEOGLOBE_STORE_PATH') or str(PROJECT_ROOT / 'geoglobe_store.json')
    MAX_GUESSES = int(os.environ.get('GEOGLOBE_MAX_GUESSES', '10'))
    SUGGESTION_LIMIT = int(os.environ.get('GEOGLOBE_SUGGESTION_LIMIT', '5'))
    LOG_LEVEL = os.environ.get('GEOGLOBE_LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('GEOGLOBE_LOG_FILE') or None
