"""
Task Manager Development Server
"""
import os

from app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 3000)),
        debug=app.config.get("DEBUG", False),
    )
