import os
from pathlib import Path

# -----------------------------
# DATA SOURCES
# -----------------------------
BASE_DIR = Path(__file__).resolve().parent

CSV_PATH = Path(os.environ.get("EXCLUSION_MAP_CSV", BASE_DIR / "data" / "country_metrics_public.csv"))
GEOJSON_SOURCE = os.environ.get(
    "EXCLUSION_MAP_GEOJSON",
    "https://raw.githubusercontent.com/leakyMirror/map-of-europe/master/GeoJSON/europe.geojson",
)
REQUEST_TIMEOUT = 30  # seconds

CODE_COL = "iso2"
NAME_COL = "country_name"
FEATURE_CODE_KEY = "ISO2"           # properties.ISO2 on every boundary feature
FEMALE_COL = "visual_impairment_female"
MALE_COL = "visual_impairment_male"
CONTEXT_COL = "digital_context"
RATIO_COL = "ratio"

# -----------------------------
# SERVER
# -----------------------------
HOST = "127.0.0.1"
PORT = 8050

# -----------------------------
# THEME CONSTANTS
# -----------------------------
BG          = "#0a0b0d"
PANEL       = "#12141a"
BORDER      = "rgba(255,255,255,0.06)"
TEXT        = "#f4f4f5"
TEXT_DIM    = "#71717a"
TEXT_BRIGHT = "#fafafa"
ACCENT      = "#10b981"
ACCENT_ALT  = "#3b82f6"
HILITE      = "#ef4444"               # active country in every view
DANGER      = "#ef4444"
MISSING_COLOR = "#2b3a55"             # country in the dataset, value absent
NO_DATA_COLOR = "rgba(255,255,255,0.04)"  # shape with no dataset row
SHAPE_LINE  = "rgba(255,255,255,0.18)"
COLOR_SCALE = "Turbo"
FONT_FAMILY = "'Inter', system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif"
