"""
Vue "liste de produits".

Au premier rendu, la vue appelle une seule fois l'API produits, garde le
tableau reçu dans son état et l'affiche sous forme de liste. En cas d'échec
l'erreur est seulement journalisée et la liste reste vide.
"""
import os
import time
from typing import Any, Dict, List, Tuple
import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger
from prometheus_client import Counter

SERVICE_NAME = "ecommerce-webapp"

# URL fixe du backend (non configurable)
PRODUCTS_URL = "http://ecommerce-backend-env.eba-amthwwmn.us-east-1.elasticbeanstalk.com/products"

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

EXTERNAL_CALL_COUNT = Counter(
    "external_service_calls_total",
    "Total external service calls",
    ["service", "target_service", "status"]
)


def format_price(value) -> str:
    """2 -> "2", 2.0 -> "2", 2.5 -> "2.5"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


templates = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
)


class ProductListView:
    def __init__(self, url: str = PRODUCTS_URL):
        self.url = url
        self.products: List[Dict[str, Any]] = []
        self.mounted = False

    async def mount(self, client: httpx.AsyncClient) -> None:
        """Fetch the product list once. Failures are logged, never raised."""
        if self.mounted:
            return
        self.mounted = True

        start_time = time.time()
        try:
            resp = await client.get(self.url)
            resp.raise_for_status()
            products = resp.json()
            if not isinstance(products, list):
                raise ValueError(f"expected a JSON array, got {type(products).__name__}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching products: {e!r}")
            EXTERNAL_CALL_COUNT.labels(
                service=SERVICE_NAME,
                target_service="ecommerce-api",
                status="error"
            ).inc()
            return

        EXTERNAL_CALL_COUNT.labels(
            service=SERVICE_NAME,
            target_service="ecommerce-api",
            status="success"
        ).inc()
        logger.info(
            f"Fetched {len(products)} products",
            extra={"latency": time.time() - start_time}
        )
        self.products = products

    def rows(self) -> List[Tuple[Any, str]]:
        """(key, line) pairs, one per product, line reading "name — $price"."""
        return [(p["id"], f"{p['name']} — ${format_price(p['price'])}") for p in self.products]

    def render(self) -> str:
        return templates.get_template("index.html").render(rows=self.rows())
