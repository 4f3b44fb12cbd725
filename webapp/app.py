import os
import httpx
from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from loguru import logger
from dotenv import load_dotenv
from view import ProductListView

# Chargement des variables d'environnement
load_dotenv()

DEFAULT_PORT = 3001

# Config logging JSON
logger.remove()
logger.add(
    sink=os.getenv("LOG_FILE", "logs.json"),
    format="{time:YYYY-MM-DDTHH:mm:ss.SSSZ} | {level} | {message} | {extra}",
    level=os.getenv("LOG_LEVEL", "INFO"),
    serialize=True,
    rotation="1 day",
)

app = FastAPI(title="E-commerce Webapp")


def make_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


@app.get("/", response_class=HTMLResponse)
async def index():
    """Page liste de produits: une vue neuve, montée puis rendue"""
    view = ProductListView()
    async with make_client() as client:
        await view.mount(client)
    return view.render()


if __name__ == "__main__":
    port = int(os.getenv("PORT") or DEFAULT_PORT)
    logger.info(f"Webapp running on port {port}")
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=port)
