from .app import create_app
from .common.config import settings

# SERVICE=products|orders selects which of the two services this process runs
app = create_app(settings.SERVICE)

if __name__ == "__main__":
    app.run(host=settings.APP_HOST, port=settings.APP_PORT)
