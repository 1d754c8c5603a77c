"""Main FastAPI application for the workflow sandbox."""

from workflow_sandbox.config import get_config
from workflow_sandbox.factory import create_app


app = create_app(get_config())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, **get_config().get_uvicorn_config())
