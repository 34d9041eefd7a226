"""Entry point: python -m chatbot_server [--env-file PATH]"""
import argparse
import asyncio
import logging
import os
import sys

from chatbot_server.core.config import LOG_LEVEL
from chatbot_server.server import FATAL_EXIT_CODE, run_server


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the RAG chatbot server.")
    parser.add_argument(
        "--env-file",
        default=os.getenv("ENV_FILE", ".env"),
        help="Path to the env file with the MongoDB settings (default: $ENV_FILE or .env)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        code = asyncio.run(run_server(args.env_file))
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted before the server was listening")
        code = FATAL_EXIT_CODE
    sys.exit(code)


if __name__ == "__main__":
    main()
