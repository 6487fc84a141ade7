"""Development entrypoint delegating to the application package."""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from clickcrate_actions.main import app


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")), debug=True)
