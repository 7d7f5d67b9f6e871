import logging
import os


# load envs
from dotenv import load_dotenv
load_dotenv()


PORT = int(os.getenv("PORT", 5000))
HOST = os.getenv("HOST", None)
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


from server.app import create_app

app = create_app()


if __name__ == "__main__":
    app.run(debug=DEBUG, port=PORT, host=HOST)
