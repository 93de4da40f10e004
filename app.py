"""Development entrypoint: ``python app.py``.

In production run the factory under a WSGI server, e.g.
``gunicorn "src.qr_attendance.qr_attendance.main:create_app()"``.
"""
import os

from src.qr_attendance.qr_attendance.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "3000")), debug=bool(app.config.get("DEBUG")))
