"""
Corse DataViz dashboard
Sport facilities, energy consumption and wildfire history across Corsica
"""
import os
import logging
from flask import Flask, redirect
from dash import Dash
import dash_bootstrap_components as dbc

# Page structure and interactivity
from layout import create_layout
from callbacks import register_callbacks

# Import data loader (normalizes the static sources on first call)
from data_loader import get_dataset
from filters import available_years

# ==========================
# LOGGING CONFIGURATION
# ==========================
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==========================
# PRELOAD DATA ON STARTUP
# ==========================
logger.info("=" * 70)
logger.info("PRELOADING CORSE DATAVIZ DATASET")
logger.info("=" * 70)

years = []
try:
    dataset = get_dataset()
    years = available_years(dataset.fires)

    logger.info("✓ Dataset preloaded successfully")
    logger.info(f"✓ {len(dataset.communes)} communes, {len(dataset.fires)} fire events")
    logger.info(f"✓ Fire years available: {len(years)}")
    logger.info("=" * 70)
    logger.info("APPLICATION READY")
    logger.info("=" * 70)

except Exception as e:
    logger.error("=" * 70)
    logger.error("FAILED TO PRELOAD DATASET")
    logger.error(f"Error: {e}", exc_info=True)
    logger.error("=" * 70)
    logger.error("Application may not function correctly")
    logger.error("Please check CORSE_COMMUNES_SOURCE and CORSE_FIRES_SOURCE")

# ==========================
# FLASK SERVER SETUP
# ==========================
server = Flask(__name__)
server.secret_key = os.environ.get("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")

# ==========================
# FLASK ROUTES
# ==========================

@server.route("/")
@server.route("/home")
def index():
    """Redirect root to the dashboard"""
    return redirect("/dash/")

@server.route("/health")
def health():
    """Liveness probe; does not touch the dataset"""
    return {"status": "healthy", "app": "Corse DataViz"}, 200

# ==========================
# DASH APP SETUP
# ==========================
logger.info("Initializing Dash application...")

app = Dash(
    __name__,
    server=server,
    url_base_pathname="/dash/",
    external_stylesheets=[
        dbc.themes.BOOTSTRAP,
        "https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.4.0/css/all.min.css"
    ],
    suppress_callback_exceptions=True,
    title="Corse DataViz",
    meta_tags=[
        {"name": "viewport", "content": "width=device-width, initial-scale=1"}
    ]
)

# Year options come from the preloaded fires
app.layout = create_layout(years)

# Filter, reset and dashboard callbacks
register_callbacks(app)

logger.info("Dash application initialized")

# ==========================
# RUN SERVER
# ==========================
if __name__ == "__main__":
    port = int(os.environ.get("PORT", 10000))
    debug = os.environ.get("FLASK_ENV") == "development"

    logger.info(f"Starting server on port {port} (debug={debug})")

    server.run(
        host="0.0.0.0",
        port=port,
        debug=debug
    )
