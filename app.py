"""
Entry point for the Financial Supervision audit API.

Run with:
    python app.py

Or with a production WSGI server:
    gunicorn -w 4 app:application
"""

from audit_api import create_app

application = create_app()

if __name__ == "__main__":
    port = application.extensions["audit_api"].settings.port
    application.run(host="0.0.0.0", port=port, debug=False)
