# task_manager/__main__.py

import uvicorn
from task_manager.logging_setup import setup_logging


def main():
    from task_manager.main import app

    settings = app.state.settings
    setup_logging(settings.log_level, settings.log_dir)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
