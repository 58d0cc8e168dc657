import os

# ================== DATA SOURCE ==================
# Remote raw CSV (optional). Empty means "use the local file".
DATA_URL = os.getenv("PLOTCORR_DATA_URL", "")
DATA_PATH = os.getenv("PLOTCORR_DATA_PATH", "data/platodb.csv")
LOCAL_FALLBACKS = [DATA_PATH, "data/sample.csv", "data.csv"]
DATE_COLUMN = os.getenv("PLOTCORR_DATE_COLUMN", "Date")
HTTP_TIMEOUT = float(os.getenv("PLOTCORR_HTTP_TIMEOUT", "10"))

# ================== ANALYSIS ==================
DEFAULT_WINDOW = int(os.getenv("PLOTCORR_WINDOW", "30"))
SCAN_THRESHOLD = float(os.getenv("PLOTCORR_SCAN_THRESHOLD", "0.80"))

# ================== CHARTS ==================
COLOR_A = "#17BECF"
COLOR_B = "#B22222"
COLOR_CORR = "#6A3D9A"
FIG_W, FIG_H = 9.0, 4.2
CHART_TITLE = "Time Series Data"

LOG_LEVEL = os.getenv("PLOTCORR_LOG_LEVEL", "INFO").upper()
