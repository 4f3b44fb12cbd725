import os
import time
import uuid
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from loguru import logger
from dotenv import load_dotenv
from typing import List
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from models import Product, products_db

# Chargement des variables d'environnement
load_dotenv()

SERVICE_NAME = "ecommerce-api"
DEFAULT_PORT = 3000

WELCOME_HTML = (
    "<h2>Welcome to the E-commerce API 🚀</h2>"
    '<p>Try <a href="/products">/products</a> or <a href="/health">/health</a></p>'
)

# Config logging JSON
logger.remove()
logger.add(
    sink=os.getenv("LOG_FILE", "logs.json"),
    format="{time:YYYY-MM-DDTHH:mm:ss.SSSZ} | {level} | {message} | {extra}",
    level=os.getenv("LOG_LEVEL", "INFO"),
    serialize=True,
    rotation="1 day",
)

# Prometheus metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["service", "method", "endpoint"]
)

app = FastAPI(title="E-commerce API")

# Toutes les origines sont acceptées (pas de liste blanche)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Corps JSON parsé pour toute requête application/json, même si aucune route ne le lit
@app.middleware("http")
async def parse_json_body(request: Request, call_next):
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json") and await request.body():
        try:
            await request.json()
        except ValueError:
            logger.warning(f"Malformed JSON body on {request.method} {request.url.path}")
            return JSONResponse(status_code=400, content={"detail": "There was an error parsing the body"})
    return await call_next(request)


# Middleware pour logger les requests avec correlation ID
@app.middleware("http")
async def log_requests(request: Request, call_next):
    trace_id = request.headers.get("X-Trace-ID", str(uuid.uuid4()))
    start_time = time.time()

    with logger.contextualize(trace_id=trace_id, service=SERVICE_NAME):
        logger.info(f"Request: {request.method} {request.url.path}")

        response = await call_next(request)
        latency = time.time() - start_time

        REQUEST_COUNT.labels(
            service=SERVICE_NAME,
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()
        REQUEST_LATENCY.labels(
            service=SERVICE_NAME,
            method=request.method,
            endpoint=request.url.path
        ).observe(latency)

        logger.info(
            f"Response status: {response.status_code}",
            extra={"status": response.status_code, "latency": latency}
        )

        response.headers["X-Trace-ID"] = trace_id
        return response


def get_port() -> int:
    """Port d'écoute: $PORT s'il est défini et non vide, sinon 3000."""
    return int(os.getenv("PORT") or DEFAULT_PORT)


@app.get("/", response_class=HTMLResponse)
async def root():
    return WELCOME_HTML


@app.get("/products", response_model=List[Product])
async def get_products():
    logger.info("Fetching all products")
    return products_db


@app.get("/health")
async def health():
    """Health check endpoint (sonde de disponibilité de l'hébergeur)"""
    return {"status": "UP", "message": "Backend is healthy"}


@app.get("/metrics")
async def metrics():
    """Endpoint /metrics compatible Prometheus"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    port = get_port()
    logger.info(f"API running on port {port}")
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=port)
