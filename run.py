"""
Development entry point.

Usage:
    python run.py

Starts the Flask development server on http://localhost:5000 against the
MongoDB at MONGO_URI (default mongodb://localhost:27017).
"""

from blog_users import create_app

app = create_app()

if __name__ == '__main__':
    app.run(
        host='127.0.0.1',
        port=5000,
        debug=True,
    )
