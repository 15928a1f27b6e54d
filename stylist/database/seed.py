"""Demo catalog and shopper profiles."""
from typing import List

from sqlalchemy.orm import Session

from stylist.analytics.logger import logger
from stylist.database import models
from stylist.database.schemas import Product, Shopper

PRODUCTS = [
    # Men
    {"id": "prod-bwk-oversized-tee", "brand": "Bewakoof", "name": "Bewakoof Oversized Graphic Tee",
     "price": 799, "category": "T-Shirts", "sizes": ["S", "M", "L", "XL"], "stock_count": 24,
     "image_url": "/data/men/bewakoof-oversized-graphic-tee.jpg", "color": "Black", "occasion": "Casual",
     "material": "Cotton", "rating": 4.3},
    {"id": "prod-bwk-joggers", "brand": "Bewakoof", "name": "Bewakoof Relaxed Fit Joggers",
     "price": 1199, "category": "Pants", "sizes": ["M", "L", "XL"], "stock_count": 8,
     "image_url": "/data/men/bewakoof-relaxed-joggers.jpg", "color": "Olive", "occasion": "Casual",
     "material": "Cotton Blend", "rating": 4.1},
    {"id": "prod-tss-cargo", "brand": "The Souled Store", "name": "The Souled Store Utility Cargo Pants",
     "price": 1599, "category": "Pants", "sizes": ["M", "L", "XL"], "stock_count": 15,
     "image_url": "/data/men/souled-store-utility-cargo.jpg", "color": "Beige", "occasion": "Casual",
     "material": "Cotton Twill", "rating": 4.4},
    {"id": "prod-fm-denim", "brand": "Flying Machine", "name": "Flying Machine Slim Fit Denim Jacket",
     "price": 2499, "category": "Jackets", "sizes": ["M", "L"], "stock_count": 6,
     "image_url": "/data/men/flying-machine-denim-jacket.jpg", "color": "Indigo", "occasion": "Casual",
     "material": "Denim", "rating": 4.2},
    {"id": "prod-as-blue-shirt", "brand": "Allen Solly", "name": "Allen Solly Blue Formal Shirt",
     "price": 1899, "category": "Shirts", "sizes": ["38", "40", "42", "44"], "stock_count": 18,
     "image_url": "/data/men/allen-solly-blue-formal-shirt.jpg", "color": "Blue", "occasion": "Formal",
     "material": "Cotton", "rating": 4.5},
    {"id": "prod-as-white-shirt", "brand": "Allen Solly", "name": "Allen Solly White Oxford Shirt",
     "price": 1799, "category": "Shirts", "sizes": ["38", "40", "42"], "stock_count": 9,
     "image_url": "/data/men/allen-solly-white-oxford.jpg", "color": "White", "occasion": "Formal",
     "material": "Cotton", "rating": 4.4},
    {"id": "prod-lp-black-trousers", "brand": "Louis Philippe", "name": "Louis Philippe Black Slim Fit Trousers",
     "price": 2599, "category": "Pants", "sizes": ["30", "32", "34", "36"], "stock_count": 12,
     "image_url": "/data/men/louis-philippe-black-trousers.jpg", "color": "Black", "occasion": "Formal",
     "material": "Poly Viscose", "rating": 4.6},
    {"id": "prod-vh-blazer", "brand": "Van Heusen", "name": "Van Heusen Navy Tailored Blazer",
     "price": 5999, "category": "Blazers", "sizes": ["38", "40", "42"], "stock_count": 4,
     "image_url": "/data/men/van-heusen-navy-blazer.jpg", "color": "Navy", "occasion": "Formal",
     "material": "Wool Blend", "rating": 4.7},
    # Women
    {"id": "prod-w-white-floral-top", "brand": "W", "name": "W White Floral Printed Round Neck Top",
     "price": 1299, "category": "Tops", "sizes": ["XS", "S", "M", "L"], "stock_count": 7,
     "image_url": "/data/women/w-white-floral-top.jpg", "color": "White", "occasion": "Festive",
     "material": "Rayon", "rating": 4.5},
    {"id": "prod-fg-shoulder-bag", "brand": "Forever Glam", "name": "Forever Glam Off-White Shoulder Bag",
     "price": 2199, "category": "Accessories", "sizes": [], "stock_count": 11,
     "image_url": "/data/women/forever-glam-shoulder-bag.jpg", "color": "Off-White", "occasion": "Party",
     "material": "Faux Leather", "rating": 4.3},
    {"id": "prod-aurelia-kurta", "brand": "Aurelia", "name": "Aurelia Floral Embroidered Kurta",
     "price": 1899, "category": "Ethnic Wear", "sizes": ["S", "M", "L"], "stock_count": 14,
     "image_url": "/data/women/aurelia-embroidered-kurta.jpg", "color": "Peach", "occasion": "Festive",
     "material": "Cotton", "rating": 4.6},
    {"id": "prod-aurelia-palazzo", "brand": "Aurelia", "name": "Aurelia Printed Palazzo Pants",
     "price": 1199, "category": "Bottoms", "sizes": ["S", "M", "L", "XL"], "stock_count": 20,
     "image_url": "/data/women/aurelia-printed-palazzo.jpg", "color": "Mustard", "occasion": "Festive",
     "material": "Rayon", "rating": 4.2},
    {"id": "prod-pantaloons-top", "brand": "Pantaloons", "name": "Pantaloons Ruffled Peplum Top",
     "price": 999, "category": "Tops", "sizes": ["S", "M", "L"], "stock_count": 16,
     "image_url": "/data/women/pantaloons-peplum-top.jpg", "color": "Coral", "occasion": "Casual",
     "material": "Polyester", "rating": 4.0},
    {"id": "prod-f21-jeans", "brand": "Forever 21", "name": "Forever 21 High Rise Wide Leg Jeans",
     "price": 2299, "category": "Bottoms", "sizes": ["26", "28", "30"], "stock_count": 10,
     "image_url": "/data/women/forever21-wide-leg-jeans.jpg", "color": "Light Blue", "occasion": "Casual",
     "material": "Denim", "rating": 4.1},
]

SHOPPERS = [
    {"id": "user-aarav", "name": "Aarav Mehta", "age": 21, "style_preference": "Streetwear",
     "favorite_brands": ["Bewakoof", "The Souled Store"], "size": "L", "loyalty_tier": "Bronze",
     "loyalty_points": 250},
    {"id": "user-rohan", "name": "Rohan Kapoor", "age": 32, "style_preference": "Shirts",
     "favorite_brands": ["Allen Solly", "Van Heusen"], "size": "40", "loyalty_tier": "Silver",
     "loyalty_points": 1200},
    {"id": "user-priya", "name": "Priya Sharma", "age": 28, "style_preference": "Ethnic Wear",
     "favorite_brands": ["W", "Aurelia"], "size": "M", "loyalty_tier": "Gold",
     "loyalty_points": 3500},
    {"id": "user-sneha", "name": "Sneha Reddy", "age": 25, "style_preference": "Tops",
     "favorite_brands": ["Pantaloons", "Forever 21"], "size": "S", "loyalty_tier": "Silver",
     "loyalty_points": 600},
]


def demo_products() -> List[Product]:
    return [Product(**p) for p in PRODUCTS]


def demo_shoppers() -> List[Shopper]:
    return [Shopper(**u) for u in SHOPPERS]


def seed_database(db: Session) -> dict:
    """Insert demo rows that are not already present."""
    added = {"products": 0, "users": 0}
    for position, data in enumerate(PRODUCTS):
        if db.query(models.Product).filter(models.Product.id == data["id"]).first():
            continue
        db.add(models.Product(position=position, **data))
        added["products"] += 1
    for data in SHOPPERS:
        if db.query(models.User).filter(models.User.id == data["id"]).first():
            continue
        db.add(models.User(**data))
        added["users"] += 1
    db.commit()
    logger.info(f"Seeded {added['products']} products and {added['users']} shoppers")
    return added
