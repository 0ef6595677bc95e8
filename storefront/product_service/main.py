# storefront/product_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Product Catalog (dev mock)")


PRODUCTS = {
    1: {
        "id": 1,
        "name": "Keyboard",
        "price": 199.99,
        "old_price": 249.99,
        "image": "https://cdn.example.com/keyboard.png",
        "brand": "Keychron",
        "shipping_price": 15.0,
    },
    2: {
        "id": 2,
        "name": "Mouse",
        "price": 49.50,
        "old_price": None,
        "image": "https://cdn.example.com/mouse.png",
        "brand": "Logitech",
        "shipping_price": 5.0,
    },
    3: {
        "id": 3,
        "name": "Monitor",
        "price": 899.00,
        "old_price": 999.00,
        "image": "https://cdn.example.com/monitor.png",
        "brand": "Dell",
        "shipping_price": 0.0,
    },
}

@app.get("/products/{product_id}")
def get_product(product_id: int):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
