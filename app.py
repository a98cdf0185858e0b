"""Application entry point for the guesthouse front-desk API."""

import logging

from guesthouse.webapp import create_app

logging.basicConfig(level=logging.INFO)

app = create_app()


if __name__ == "__main__":
    app.run(debug=True)
