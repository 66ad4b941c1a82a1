import logging

import uvicorn

from doctranslate.api_server import signal_shutdown

logger = logging.getLogger("DocTranslate.Server")


class TranslatorServer(uvicorn.Server):
    """
    uvicorn waits for open requests to drain before it runs the lifespan
    shutdown, so the app is told about the exit first. In-flight translations
    are abandoned with 503 instead of holding the shutdown for up to a minute.
    """
    async def shutdown(self, sockets=None):
        logger.info("Exit requested, abandoning in-flight translations")
        signal_shutdown(self.config.app)
        await super().shutdown(sockets=sockets)


def run_server(app, host: str, port: int):
    config = uvicorn.Config(app, host=host, port=port, log_level="info")
    TranslatorServer(config).run()
