import uvicorn

from maladireta.core import config
from maladireta.main import app  # noqa: F401  (uvicorn main:app)


if __name__ == "__main__":
    uvicorn.run(
        "maladireta.main:app",
        host="0.0.0.0",
        port=config.PORT,
        reload=config.ENV == "development",
    )
