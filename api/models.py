from typing import List, Union
from pydantic import BaseModel

class Product(BaseModel):
    id: int
    name: str
    price: Union[int, float]  # 10 reste un entier en JSON

# Catalogue statique, construit au démarrage et jamais modifié
products_db: List[Product] = [
    Product(id=1, name="Book", price=10),
]
