# app/__main__.py

import uvicorn

from app.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run("app:app", host="0.0.0.0", port=settings.listen_port)


if __name__ == "__main__":
    main()
