from ldfi.errors import ConfigError
import logging
import sys

if __name__ == "__main__":

    try:
        from ldfi.settings import settings
        from ldfi.api.app import app
        from ldfi.api.dependencies import get_supply_service

        # Fail before listening if the chain clients can't be built
        get_supply_service()
    except ConfigError as e:
        print(f"Can't load configuration: {e}")
        sys.exit(1)

    import uvicorn

    logger = logging.getLogger("[Main]")

    host, port = settings.listen_host_port()

    logger.info(f"Listen to http server: {host}:{port}")
    uvicorn.run(app, host=host, port=port)

    logger.info("LDFI supply API stopped!")
