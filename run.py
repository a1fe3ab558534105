"""
Entry point for running the Wellbeing Tracker Flask application.

This module imports the application factory and starts the development
server when executed directly. In production, a WSGI server like
gunicorn should import ``app`` from ``wsgi`` and serve it instead.
"""

from wellbeing_tracker import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
