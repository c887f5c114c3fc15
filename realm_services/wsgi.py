"""Application instance for Gunicorn (``realm_services.wsgi:app``)."""
from realm_services.flask_app import create_app

# ─────────────────────────────────────────────────────────────────────────────
# Application Instance (for Gunicorn)
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
