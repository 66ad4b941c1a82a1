import argparse
import os
import sys
import logging

from doctranslate.api_server import create_app
from doctranslate.config import ConfigurationError, load_settings
from doctranslate.server import run_server

logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(name)s - %(message)s')
logger = logging.getLogger("DocTranslate.Main")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Document translation endpoint")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")))
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # 설정이 없으면 요청을 받기 전에 종료
    try:
        settings = load_settings()
        app = create_app(settings)
    except ConfigurationError as e:
        logger.error(f"Startup aborted: {e}")
        sys.exit(1)

    logger.info(f"Serving on {args.host}:{args.port}")
    run_server(app, args.host, args.port)


if __name__ == "__main__":
    main()
